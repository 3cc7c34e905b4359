"""
Wizard Session - The step machine around one live order draft.

The session owns exactly one Draft. Each edit replaces the Draft with a
new immutable value and publishes it to subscribers; pricing and
validation read whatever Draft is current. Steps move strictly one at a
time. Confirming at the last step submits the order through the
configured order creator.
"""
import logging
from typing import Callable, Mapping, Optional

from ..config.settings import get_settings, Settings
from ..data.rate_tables import RateTables, get_rate_tables
from ..engine import stops as stop_ops
from ..engine.models import Draft, PricingBreakdown, TaskType
from ..engine.package_limits import StopSummary, flagged_stops, summarize_stops
from ..engine.pricing_engine import PricingEngine
from ..errors import StopIndexError, SubmissionError, WizardClosedError
from .collaborators import (
    ITEM_PHOTO_OPTIONS,
    STOP_PHOTO_OPTIONS,
    MediaPicker,
    Navigator,
    OrderCreator,
)
from .submission import SubmittedOrder, submit
from .validation import PROGRESS_STEPS, WizardStep, can_advance, missing_fields

logger = logging.getLogger(__name__)

DraftListener = Callable[[Draft], None]


class WizardSession:
    """
    Guided order creation for a single draft.

    Starts at the task type step, or at the address step when the caller
    pre-selects a task type.
    """

    def __init__(
        self,
        rate_tables: Optional[RateTables] = None,
        settings: Optional[Settings] = None,
        initial_task_type: Optional[TaskType] = None,
        order_creator: Optional[OrderCreator] = None,
        navigator: Optional[Navigator] = None,
    ):
        self.settings = settings or get_settings()
        self.rates = rate_tables or get_rate_tables()
        self.engine = PricingEngine(self.settings, self.rates)
        self.order_creator = order_creator
        self.navigator = navigator

        self._draft: Optional[Draft] = Draft(task_type=initial_task_type)
        self.step = WizardStep.ADDRESSES if initial_task_type else WizardStep.TASK_TYPE
        self.submitted: Optional[SubmittedOrder] = None
        self.closed = False
        self._listeners: list[DraftListener] = []

    # ── Draft access ─────────────────────────────────────────

    @property
    def draft(self) -> Draft:
        self._ensure_open()
        return self._draft

    @property
    def is_active(self) -> bool:
        return not self.closed and self.submitted is None

    def _ensure_open(self):
        if self.closed:
            raise WizardClosedError("Wizard was exited; the draft is discarded")
        if self.submitted is not None:
            raise WizardClosedError(f"Order {self.submitted.order_id} was already submitted")

    def subscribe(self, listener: DraftListener) -> Callable[[], None]:
        """Register a listener for new draft snapshots. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, draft: Draft) -> Draft:
        self._draft = draft
        logger.debug("Published draft at step %d with %d stop(s)", self.step, draft.stop_count)
        for listener in list(self._listeners):
            listener(draft)
        return draft

    # ── Edits ────────────────────────────────────────────────

    def edit(self, **changes) -> Draft:
        """Replace draft fields, e.g. ``edit(pickup="123 Main St")``."""
        return self._publish(self.draft.with_changes(**changes))

    def select_task_type(self, task_type: TaskType) -> Draft:
        return self.edit(task_type=TaskType(task_type))

    def add_stop(self) -> Draft:
        return self._publish(stop_ops.add_stop(self.draft))

    def remove_stop(self, index: int) -> Draft:
        return self._publish(stop_ops.remove_stop(self.draft, index))

    def update_stop(self, index: int, changes: Mapping) -> Draft:
        return self._publish(stop_ops.update_stop(self.draft, index, changes))

    def remove_stop_by_id(self, stop_id: str) -> Draft:
        return self._publish(stop_ops.remove_stop_by_id(self.draft, stop_id))

    def update_stop_by_id(self, stop_id: str, changes: Mapping) -> Draft:
        return self._publish(stop_ops.update_stop_by_id(self.draft, stop_id, changes))

    async def attach_photo(self, picker: MediaPicker, stop_index: Optional[int] = None) -> bool:
        """
        Ask the media picker for a photo of the item or of one stop.

        Returns True when a photo was attached. Cancelling leaves the
        draft unchanged, and so does a stop removed while the picker is open.
        """
        draft = self.draft
        stop_id = None
        if stop_index is not None:
            if not 0 <= stop_index < draft.stop_count:
                raise StopIndexError(stop_index, draft.stop_count)
            stop_id = draft.stops[stop_index].stop_id
            options = STOP_PHOTO_OPTIONS
        else:
            options = ITEM_PHOTO_OPTIONS

        photo = await picker.pick_image(options)
        if photo is None:
            logger.debug("Photo selection cancelled")
            return False

        if stop_id is not None:
            try:
                self.update_stop_by_id(stop_id, {"item_photo": photo})
            except KeyError:
                logger.debug("Stop %s was removed before its photo arrived", stop_id)
                return False
        else:
            self.edit(item_photo=photo)
        return True

    # ── Derived views ────────────────────────────────────────

    @property
    def quote(self) -> PricingBreakdown:
        """Price breakdown of the current draft, recomputed on every read."""
        return self.engine.calculate(self.draft)

    @property
    def stop_warnings(self) -> dict[int, list[str]]:
        return flagged_stops(self.draft, self.rates)

    @property
    def stop_summary(self) -> StopSummary:
        return summarize_stops(self.draft.stops, self.rates)

    def can_advance(self) -> bool:
        return self.is_active and can_advance(self.step, self._draft)

    def missing_fields(self) -> list[str]:
        return missing_fields(self.step, self.draft)

    def progress(self) -> int:
        """Number of lit segments out of PROGRESS_STEPS."""
        if self.submitted is not None:
            return PROGRESS_STEPS
        return int(self.step)

    # ── Transitions ──────────────────────────────────────────

    def advance(self) -> WizardStep:
        """
        Move to the next step, or submit the order from the confirm step.

        A step with missing required fields stays where it is.
        """
        draft = self.draft
        if not can_advance(self.step, draft):
            logger.debug("Step %d blocked by %s", self.step, ", ".join(missing_fields(self.step, draft)))
            return self.step

        if self.step == WizardStep.CONFIRM:
            self._submit(draft)
            return self.step

        self.step = WizardStep(self.step + 1)
        return self.step

    def back(self) -> Optional[WizardStep]:
        """
        Move to the previous step.

        From the first step the wizard is exited: the draft is discarded and
        None is returned.
        """
        self._ensure_open()

        if self.step == WizardStep.TASK_TYPE:
            self.closed = True
            self._draft = None
            logger.debug("Wizard exited from the first step")
            if self.navigator is not None:
                self.navigator.exit_wizard()
            return None

        self.step = WizardStep(self.step - 1)
        return self.step

    def _submit(self, draft: Draft):
        if self.order_creator is None:
            raise SubmissionError("No order creator configured for this wizard session")

        price = self.engine.submission_price(draft)
        self.submitted = submit(draft, self.order_creator, price, eta=self.settings.default_eta)
        self._draft = None

        if self.navigator is not None:
            self.navigator.open_tracking(self.submitted.order_id)
