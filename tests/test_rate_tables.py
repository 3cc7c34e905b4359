import pytest
import sys
import os
import shutil

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from pathlib import Path

from delivery_quote.data.rate_tables import RATE_FILES, load_rate_tables
from delivery_quote.engine import Draft, TaskType, stops
from delivery_quote.engine.package_limits import flagged_stops, stop_limit_warnings, summarize_stops

RATES_DIR = Path(src_path) / 'delivery_quote' / 'data'


@pytest.fixture(scope="module")
def rates():
    return load_rate_tables(RATES_DIR)


def test_brackets_depend_on_task_type(rates):
    assert [b.bracket_id for b in rates.weight_options(TaskType.SEND)] == ["0-1", "1-3", "3-5", "5-10"]
    assert [b.bracket_id for b in rates.weight_options(TaskType.MULTISTOP)] == ["0-1", "1-3"]
    assert [b.bracket_id for b in rates.size_options(TaskType.ERRAND)] == ["small", "medium", "large", "xlarge"]
    assert [b.bracket_id for b in rates.size_options(TaskType.MULTISTOP)] == ["small", "medium"]


def test_fixed_fees_loaded(rates):
    assert rates.base_fares == {"drone": 79, "robot": 59}
    assert rates.distance_rates == {"drone": 30, "robot": 15}
    assert rates.distance_km == 5
    assert rates.per_stop_fee == 10
    assert rates.per_stop_monitoring_fee == 10
    assert rates.insurance_fee == 20
    assert rates.platform_fee == 10
    assert len(rates.rates_hash) == 12


def test_missing_rate_file_raises(tmp_path):
    for name in RATE_FILES[:-1]:
        shutil.copy(RATES_DIR / name, tmp_path / name)

    with pytest.raises(FileNotFoundError, match="fixed_fees.csv"):
        load_rate_tables(tmp_path)


def test_edited_rate_file_changes_hash(rates, tmp_path):
    for name in RATE_FILES:
        shutil.copy(RATES_DIR / name, tmp_path / name)
    fees = (tmp_path / "fixed_fees.csv").read_text().replace("platform_fee,10", "platform_fee,15")
    (tmp_path / "fixed_fees.csv").write_text(fees)

    edited = load_rate_tables(tmp_path)
    assert edited.platform_fee == 15
    assert edited.rates_hash != rates.rates_hash


def test_oversized_stop_is_flagged_but_allowed_stop_is_not(rates):
    draft = stops.add_stop(stops.add_stop(Draft(task_type=TaskType.MULTISTOP)))
    draft = stops.update_stop(draft, 1, {"weight": "3-5", "size": "large"})

    flagged = flagged_stops(draft, rates)

    assert list(flagged) == [1]
    assert "weight limit" in flagged[1][0]
    assert "size limit" in flagged[1][1]
    assert "separate" in flagged[1][-1]


def test_unknown_bracket_is_flagged(rates):
    draft = stops.update_stop(stops.add_stop(Draft()), 0, {"weight": "1-1"})
    assert stop_limit_warnings(draft.stops[0], rates)


def test_no_flags_for_single_item_orders(rates):
    draft = stops.update_stop(stops.add_stop(Draft(task_type=TaskType.SEND)), 0, {"weight": "5-10"})
    assert flagged_stops(draft, rates) == {}


def test_stop_summary(rates):
    draft = stops.add_stop(stops.add_stop(Draft(task_type=TaskType.MULTISTOP)))
    draft = stops.update_stop(draft, 0, {"item_count": 3})
    draft = stops.update_stop(draft, 1, {"weight": "0-1", "item_count": 2})

    summary = summarize_stops(draft.stops, rates)

    assert summary.total_items == 5
    assert summary.total_weight_kg == 3  # 1 kg × 3 + 0 kg × 2
    assert summary.exceeds_limits is False

    oversized = stops.update_stop(draft, 1, {"size": "xlarge"})
    assert summarize_stops(oversized.stops, rates).exceeds_limits is True
