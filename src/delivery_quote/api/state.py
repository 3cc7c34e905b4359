"""
Process-wide API state: wizard sessions and the order book they submit to.
"""
import itertools
import uuid
from typing import Any, Mapping, Optional

from ..data.rate_tables import get_rate_tables
from ..engine.models import TaskType
from ..engine.pricing_engine import PricingEngine
from ..wizard.session import WizardSession


class InMemoryOrderBook:
    """Order creator that keeps created orders in memory."""

    def __init__(self):
        self.orders: dict[str, dict] = {}
        self._ids = itertools.count(1)

    def create_task(self, payload: Mapping[str, Any]) -> Mapping[str, Any]:
        order_id = f"TASK-{next(self._ids):05d}"
        order = dict(payload, id=order_id, status="pending")
        self.orders[order_id] = order
        return order


class SessionStore:
    """Wizard sessions keyed by an opaque session id."""

    def __init__(self, order_book: InMemoryOrderBook):
        self.order_book = order_book
        self.sessions: dict[str, WizardSession] = {}

    def create(self, task_type: Optional[TaskType] = None) -> tuple[str, WizardSession]:
        session_id = uuid.uuid4().hex
        session = WizardSession(initial_task_type=task_type, order_creator=self.order_book)
        self.sessions[session_id] = session
        return session_id, session

    def get(self, session_id: str) -> WizardSession:
        """Raises KeyError for an unknown session."""
        return self.sessions[session_id]


order_book = InMemoryOrderBook()
sessions = SessionStore(order_book)
engine = PricingEngine(rate_tables=get_rate_tables())
