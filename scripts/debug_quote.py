import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from delivery_quote.data.rate_tables import load_rate_tables
from delivery_quote.engine.models import Draft, TaskType
from delivery_quote.engine.pricing_engine import calculate_price, calculate_legacy_submission_price
from delivery_quote.engine import stops

def debug():
    rates = load_rate_tables(src_path / 'delivery_quote' / 'data')

    print(f"Loaded rate tables (hash {rates.rates_hash})")
    print("Weight brackets:", [b.bracket_id for b in rates.weight_brackets])
    print("Multi-stop weights:", sorted(rates.multistop_allowed_weights))
    print("Multi-stop sizes:", sorted(rates.multistop_allowed_sizes))

    # Test Case: single Send order
    print("\n--- Send order ---")
    draft = Draft(
        task_type=TaskType.SEND,
        pickup="A",
        dropoff="B",
        product_name="Phone",
        description="Gift",
    )
    breakdown = calculate_price(draft, rates)
    print(breakdown.get_trace_text())
    print("Breakdown:", breakdown.as_dict())

    # Same order with two stops: review total vs flat submission formula
    print("\n--- With two stops ---")
    draft = stops.add_stop(stops.add_stop(draft))
    print("Review total:", calculate_price(draft, rates).total)
    print("Legacy submission price:", calculate_legacy_submission_price(draft, rates))

    for mode in ('selector', 'per_stop'):
        multi = draft.with_changes(task_type=TaskType.MULTISTOP)
        total = calculate_price(multi, rates, multistop_package_pricing=mode).total
        print(f"Multi-stop total ({mode}):", total)

if __name__ == "__main__":
    debug()
