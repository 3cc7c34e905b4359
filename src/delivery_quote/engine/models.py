"""
Data models for the order draft and its pricing.

Uses dataclasses for structured, type-safe data representation. Stops and
drafts are frozen: every edit produces a new value via ``with_changes``.
"""
import uuid
from dataclasses import dataclass, field, fields, replace, asdict
from enum import Enum
from typing import Optional


class TaskType(str, Enum):
    """Kind of delivery order, chosen in the first wizard step."""
    SEND = "send"          # single pickup -> drop-off
    ERRAND = "errand"      # merchant pickup -> user address
    MULTISTOP = "multistop"  # one pickup, N stops


class FulfillmentMode(str, Enum):
    DRONE = "drone"
    ROBOT = "robot"


DEFAULT_STOP_WEIGHT = "1-3"
DEFAULT_STOP_SIZE = "small"


def _new_stop_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class TraceStep:
    """A single step in the pricing trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass(frozen=True)
class Stop:
    """One package/destination of a multi-stop order."""
    address: str = ""
    contact_name: str = ""
    contact_phone: str = ""
    note: str = ""
    description: str = ""
    product_name: str = ""
    item_photo: Optional[str] = None
    weight: str = DEFAULT_STOP_WEIGHT
    size: str = DEFAULT_STOP_SIZE
    item_count: int = 1
    insurance: bool = False
    item_value: Optional[str] = None
    stop_id: str = field(default_factory=_new_stop_id)

    def with_changes(self, **changes) -> 'Stop':
        """Return a copy with the given fields replaced. The stop_id is fixed."""
        if 'stop_id' in changes:
            raise ValueError("stop_id cannot be changed")
        _check_field_names(self, changes)
        return replace(self, **changes)


@dataclass(frozen=True)
class Draft:
    """The in-progress order assembled by the wizard."""
    task_type: Optional[TaskType] = None

    # Addresses and contacts
    pickup: str = ""
    dropoff: str = ""
    pickup_contact: str = ""
    dropoff_contact_name: str = ""
    dropoff_contact_phone: str = ""

    # Multi-stop packages (empty unless task_type is MULTISTOP)
    stops: tuple[Stop, ...] = ()

    # Single-item fields, unused for multi-stop orders
    product_name: str = ""
    description: str = ""
    item_photo: Optional[str] = None
    weight: str = "0-1"
    size: str = "small"
    insurance: bool = False
    item_value: str = ""

    # Service and payment
    time_preference: str = "now"
    scheduled_date: str = ""
    payment_method: str = "cash"
    service_type: str = "regular"

    def __post_init__(self):
        if self.task_type is not None and not isinstance(self.task_type, TaskType):
            object.__setattr__(self, 'task_type', TaskType(self.task_type))
        if not isinstance(self.stops, tuple):
            object.__setattr__(self, 'stops', tuple(self.stops))

    @property
    def is_multistop(self) -> bool:
        return self.task_type == TaskType.MULTISTOP

    @property
    def stop_count(self) -> int:
        return len(self.stops)

    def with_changes(self, **changes) -> 'Draft':
        """Return a new Draft with the given fields replaced."""
        _check_field_names(self, changes)
        return replace(self, **changes)


def _check_field_names(instance, changes: dict):
    known = {f.name for f in fields(instance)}
    unknown = sorted(set(changes) - known)
    if unknown:
        raise ValueError(
            f"Unknown {type(instance).__name__} field(s): {', '.join(unknown)}"
        )


@dataclass
class PricingBreakdown:
    """Itemized fee decomposition of a draft."""
    base_fare: int
    distance_fee: int
    weight_fee: int
    size_fee: int
    service_fee: int
    stop_fee: int
    monitoring_fee: int
    insurance_fee: int
    platform_fee: int
    total: int
    fulfillment_mode: str = FulfillmentMode.DRONE.value
    trace: list[TraceStep] = field(default_factory=list, compare=False)

    # Metadata
    rates_hash: Optional[str] = field(default=None, compare=False)

    FEE_FIELDS = (
        'base_fare', 'distance_fee', 'weight_fee', 'size_fee', 'service_fee',
        'stop_fee', 'monitoring_fee', 'insurance_fee', 'platform_fee',
    )

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the pricing trace."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"• {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"• {t.step}: {t.description}")
        return "\n".join(lines)

    def as_dict(self) -> dict[str, int]:
        """Fee components and total as a plain dict."""
        values = {name: getattr(self, name) for name in self.FEE_FIELDS}
        values['total'] = self.total
        return values


@dataclass(frozen=True)
class SubmissionPayload:
    """Finished order handed to the external order creator."""
    task_type: TaskType
    pickup: str
    dropoff: str
    pickup_contact: str
    dropoff_contact: str
    stops: tuple[Stop, ...]
    product_name: str
    description: str
    item_photo: Optional[str]
    time_preference: str
    scheduled_date: str
    payment_method: str
    price: int
    eta: str

    def to_dict(self) -> dict:
        """Convert to the plain mapping passed to the order creator."""
        return {
            "type": self.task_type.value,
            "pickup": self.pickup,
            "dropoff": self.dropoff,
            "pickup_contact": self.pickup_contact,
            "dropoff_contact": self.dropoff_contact,
            "stops": [asdict(stop) for stop in self.stops],
            "product_name": self.product_name,
            "description": self.description,
            "item_photo": self.item_photo,
            "time_preference": self.time_preference,
            "scheduled_date": self.scheduled_date,
            "payment_method": self.payment_method,
            "price": self.price,
            "eta": self.eta,
        }
