"""
Rate Tables - Static fee data for the pricing engine.

Loads the CSV rate sheets shipped in this directory with pandas and
freezes them into plain lookup structures, so that price calculation
never touches a DataFrame and stays a pure function of its inputs.

Bracket sets are conditional on the task type: multi-stop orders may only
use the brackets flagged ``multistop_allowed`` in the CSV.
"""
import hashlib
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import pandas as pd

from ..config.settings import get_settings

logger = logging.getLogger(__name__)

RATE_FILES = (
    'weight_brackets.csv',
    'size_brackets.csv',
    'service_levels.csv',
    'fulfillment_modes.csv',
    'fixed_fees.csv',
)

MULTISTOP = 'multistop'


@dataclass(frozen=True)
class WeightBracket:
    """A weight tier with a fee per fulfillment mode."""
    bracket_id: str
    label: str
    drone_fee: int
    robot_fee: int
    min_kg: int
    multistop_allowed: bool

    def fee(self, mode: str) -> int:
        return self.robot_fee if mode == 'robot' else self.drone_fee


@dataclass(frozen=True)
class SizeBracket:
    """A package size tier with a flat fee."""
    bracket_id: str
    label: str
    fee: int
    multistop_allowed: bool


@dataclass(frozen=True)
class ServiceLevel:
    """A delivery speed option. Negative fees are discounts."""
    service_id: str
    label: str
    description: str
    fee: int


@dataclass(frozen=True)
class RateTables:
    """Immutable lookup data for pricing."""
    weight_brackets: tuple[WeightBracket, ...]
    size_brackets: tuple[SizeBracket, ...]
    service_levels: tuple[ServiceLevel, ...]
    base_fares: dict[str, int]
    distance_rates: dict[str, int]
    distance_km: int
    per_stop_fee: int
    per_stop_monitoring_fee: int
    insurance_fee: int
    platform_fee: int

    # Constants of the flat formula historically used at order submission
    legacy_base_fare: int = 50
    legacy_distance_fee: int = 30
    legacy_per_stop_fee: int = 20

    rates_hash: str = field(default="", compare=False)

    def weight_options(self, task_type: Optional[str]) -> tuple[WeightBracket, ...]:
        """Weight brackets offered for the given task type."""
        if task_type == MULTISTOP:
            return tuple(b for b in self.weight_brackets if b.multistop_allowed)
        return self.weight_brackets

    def size_options(self, task_type: Optional[str]) -> tuple[SizeBracket, ...]:
        """Size brackets offered for the given task type."""
        if task_type == MULTISTOP:
            return tuple(b for b in self.size_brackets if b.multistop_allowed)
        return self.size_brackets

    @property
    def multistop_allowed_weights(self) -> frozenset[str]:
        return frozenset(b.bracket_id for b in self.weight_brackets if b.multistop_allowed)

    @property
    def multistop_allowed_sizes(self) -> frozenset[str]:
        return frozenset(b.bracket_id for b in self.size_brackets if b.multistop_allowed)

    def find_weight(self, bracket_id: str) -> Optional[WeightBracket]:
        for bracket in self.weight_brackets:
            if bracket.bracket_id == bracket_id:
                return bracket
        return None

    def weight_fee(self, bracket_id: str, task_type: Optional[str], mode: str) -> int:
        """Fee for a weight bracket; 0 when the bracket is not offered for the task type."""
        for bracket in self.weight_options(task_type):
            if bracket.bracket_id == bracket_id:
                return bracket.fee(mode)
        return 0

    def size_fee(self, bracket_id: str, task_type: Optional[str]) -> int:
        """Fee for a size bracket; 0 when the bracket is not offered for the task type."""
        for bracket in self.size_options(task_type):
            if bracket.bracket_id == bracket_id:
                return bracket.fee
        return 0

    def service_fee(self, service_id: str) -> int:
        for level in self.service_levels:
            if level.service_id == service_id:
                return level.fee
        return 0


def get_file_hash(paths: list[Path]) -> str:
    """Get a short SHA256 hash over the contents of several files."""
    digest = hashlib.sha256()
    for path in paths:
        with open(path, 'rb') as f:
            digest.update(f.read())
    return digest.hexdigest()[:12]


def _read_sheet(path: Path) -> pd.DataFrame:
    if not path.exists():
        raise FileNotFoundError(f"Rate table {path.name} not found at {path}.")

    df = pd.read_csv(path, dtype=str).fillna('')
    df.columns = [c.strip() for c in df.columns]
    for col in df.columns:
        df[col] = df[col].astype(str).str.strip()
    return df


def _flag(value: str) -> bool:
    return str(value).lower() == 'true'


def load_rate_tables(rates_dir: Optional[Path] = None) -> RateTables:
    """
    Load all rate sheets from a directory.

    Args:
        rates_dir: Directory containing the rate CSV files. Defaults to the
            configured settings directory.

    Returns:
        Frozen RateTables instance
    """
    rates_dir = Path(rates_dir) if rates_dir else get_settings().rates_dir
    paths = [rates_dir / name for name in RATE_FILES]

    weights = _read_sheet(paths[0])
    sizes = _read_sheet(paths[1])
    services = _read_sheet(paths[2])
    modes = _read_sheet(paths[3])
    fixed = _read_sheet(paths[4])

    fixed_fees = {row['fee']: int(row['amount']) for _, row in fixed.iterrows()}

    tables = RateTables(
        weight_brackets=tuple(
            WeightBracket(
                bracket_id=row['bracket_id'],
                label=row['label'],
                drone_fee=int(row['drone_fee']),
                robot_fee=int(row['robot_fee']),
                min_kg=int(row['min_kg']),
                multistop_allowed=_flag(row['multistop_allowed']),
            )
            for _, row in weights.iterrows()
        ),
        size_brackets=tuple(
            SizeBracket(
                bracket_id=row['bracket_id'],
                label=row['label'],
                fee=int(row['fee']),
                multistop_allowed=_flag(row['multistop_allowed']),
            )
            for _, row in sizes.iterrows()
        ),
        service_levels=tuple(
            ServiceLevel(
                service_id=row['service_id'],
                label=row['label'],
                description=row['description'],
                fee=int(row['fee']),
            )
            for _, row in services.iterrows()
        ),
        base_fares={row['mode']: int(row['base_fare']) for _, row in modes.iterrows()},
        distance_rates={row['mode']: int(row['distance_rate_per_km']) for _, row in modes.iterrows()},
        distance_km=fixed_fees['distance_km'],
        per_stop_fee=fixed_fees['per_stop_fee'],
        per_stop_monitoring_fee=fixed_fees['per_stop_monitoring_fee'],
        insurance_fee=fixed_fees['insurance_fee'],
        platform_fee=fixed_fees['platform_fee'],
        legacy_base_fare=fixed_fees.get('legacy_base_fare', 50),
        legacy_distance_fee=fixed_fees.get('legacy_distance_fee', 30),
        legacy_per_stop_fee=fixed_fees.get('legacy_per_stop_fee', 20),
        rates_hash=get_file_hash(paths),
    )

    logger.info(
        "Loaded rate tables from %s (%d weight, %d size, %d service levels, hash %s)",
        rates_dir, len(tables.weight_brackets), len(tables.size_brackets),
        len(tables.service_levels), tables.rates_hash,
    )
    return tables


_rate_tables: Optional[RateTables] = None


def get_rate_tables() -> RateTables:
    """Get the global rate tables, loading them on first use."""
    global _rate_tables
    if _rate_tables is None:
        _rate_tables = load_rate_tables()
    return _rate_tables
