import pytest
import sys
import os
import asyncio

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from pathlib import Path

from delivery_quote.config.settings import Settings
from delivery_quote.data.rate_tables import load_rate_tables
from delivery_quote.engine import Draft, TaskType, stops
from delivery_quote.errors import StopIndexError, SubmissionError, WizardClosedError
from delivery_quote.wizard import WizardSession, WizardStep, PROGRESS_STEPS, can_advance, can_go_back
from delivery_quote.wizard.validation import missing_fields

RATES_DIR = Path(src_path) / 'delivery_quote' / 'data'


class FakeOrderCreator:
    def __init__(self):
        self.payloads = []

    def create_task(self, payload):
        self.payloads.append(payload)
        return {"id": f"order-{len(self.payloads)}"}


class FakeNavigator:
    def __init__(self):
        self.tracking = []
        self.exited = False

    def open_tracking(self, order_id):
        self.tracking.append(order_id)

    def exit_wizard(self):
        self.exited = True


class FakePicker:
    def __init__(self, result):
        self.result = result
        self.requests = []

    async def pick_image(self, options):
        self.requests.append(options)
        return self.result


@pytest.fixture(scope="module")
def rates():
    return load_rate_tables(RATES_DIR)


@pytest.fixture
def settings():
    return Settings(project_root=Path(src_path).parent, rates_dir=RATES_DIR)


@pytest.fixture
def creator():
    return FakeOrderCreator()


@pytest.fixture
def navigator():
    return FakeNavigator()


@pytest.fixture
def session(rates, settings, creator, navigator):
    return WizardSession(rates, settings, order_creator=creator, navigator=navigator)


# ── Step validation ──────────────────────────────────────────

def test_step_one_requires_task_type():
    assert can_advance(1, Draft()) is False
    assert can_advance(1, Draft(task_type=TaskType.SEND)) is True


def test_step_two_multistop_requires_every_stop_address():
    draft = stops.add_stop(Draft(task_type=TaskType.MULTISTOP, pickup="123 Main St"))
    assert can_advance(2, draft) is False

    draft = stops.update_stop(draft, 0, {"address": "456 Oak Ave"})
    assert can_advance(2, draft) is True


def test_step_two_single_item_requires_pickup_and_dropoff():
    draft = Draft(task_type=TaskType.ERRAND, pickup="Market")
    assert can_advance(2, draft) is False
    assert missing_fields(2, draft) == ["dropoff"]
    assert can_advance(2, draft.with_changes(dropoff="Home")) is True
    assert can_advance(2, draft.with_changes(pickup="   ", dropoff="Home")) is False


def test_step_three_multistop_requires_named_stops():
    draft = Draft(task_type=TaskType.MULTISTOP)
    assert missing_fields(3, draft) == ["stops"]

    draft = stops.add_stop(stops.add_stop(draft))
    draft = stops.update_stop(draft, 0, {"product_name": "Cake"})
    assert missing_fields(3, draft) == ["stops[1].product_name"]

    draft = stops.update_stop(draft, 1, {"product_name": "Candles"})
    assert can_advance(3, draft) is True


def test_step_three_single_item_requires_name_and_description():
    draft = Draft(task_type=TaskType.SEND, product_name="Phone")
    assert can_advance(3, draft) is False
    assert can_advance(3, draft.with_changes(description="Gift")) is True


@pytest.mark.parametrize("step", [4, 5, 6])
def test_service_payment_and_confirm_never_block(step):
    assert can_advance(step, Draft()) is True


@pytest.mark.parametrize("step", [1, 2, 3, 4, 5, 6])
def test_can_always_go_back(step):
    assert can_go_back(step) is True


# ── Session ──────────────────────────────────────────────────

def test_session_starts_at_task_type(session):
    assert session.step == WizardStep.TASK_TYPE
    assert session.advance() == WizardStep.TASK_TYPE  # blocked, no error


def test_preselected_task_type_starts_at_addresses(rates, settings):
    session = WizardSession(rates, settings, initial_task_type=TaskType.ERRAND)
    assert session.step == WizardStep.ADDRESSES
    assert session.draft.task_type == TaskType.ERRAND
    assert session.back() == WizardStep.TASK_TYPE


def test_full_send_flow_submits_once(session, creator, navigator):
    session.select_task_type(TaskType.SEND)
    assert session.advance() == WizardStep.ADDRESSES

    session.edit(pickup="A", dropoff="B", dropoff_contact_name="Ana", dropoff_contact_phone="0917")
    assert session.advance() == WizardStep.PACKAGE

    session.edit(product_name="Phone", description="Gift")
    assert session.advance() == WizardStep.SERVICE
    assert session.advance() == WizardStep.PAYMENT

    session.edit(payment_method="gcash")
    assert session.quote.total == 259
    assert session.advance() == WizardStep.CONFIRM
    assert session.progress() == 6

    session.advance()

    assert session.submitted.order_id == "order-1"
    assert navigator.tracking == ["order-1"]
    assert session.progress() == PROGRESS_STEPS

    payload = creator.payloads[0]
    assert payload["type"] == "send"
    assert payload["dropoff_contact"] == "Ana, 0917"
    assert payload["payment_method"] == "gcash"
    assert payload["price"] == 259
    assert payload["eta"] == "15 min"

    with pytest.raises(WizardClosedError):
        session.advance()
    with pytest.raises(WizardClosedError):
        session.edit(pickup="C")
    assert len(creator.payloads) == 1


def test_legacy_submission_price_setting(rates, creator):
    settings = Settings(project_root=Path(src_path).parent, rates_dir=RATES_DIR, submission_price_source="legacy")
    session = WizardSession(rates, settings, initial_task_type=TaskType.MULTISTOP, order_creator=creator)
    session.edit(pickup="123 Main St")
    session.add_stop()
    session.add_stop()
    session.update_stop(0, {"address": "1 A St", "product_name": "Cake"})
    session.update_stop(1, {"address": "2 B St", "product_name": "Candles"})

    assert session.quote.total == 299
    while session.submitted is None:
        session.advance()

    assert creator.payloads[0]["price"] == 120


def test_oversized_stop_warns_but_does_not_block(session):
    session.select_task_type(TaskType.MULTISTOP)
    session.edit(pickup="123 Main St")
    session.add_stop()
    session.update_stop(0, {"address": "456 Oak Ave", "product_name": "Sofa", "weight": "5-10"})
    session.advance()
    session.advance()

    assert list(session.stop_warnings) == [0]
    assert session.can_advance() is True
    assert session.advance() == WizardStep.SERVICE


def test_back_from_first_step_exits(session, navigator):
    assert session.back() is None
    assert session.closed is True
    assert navigator.exited is True
    with pytest.raises(WizardClosedError):
        session.draft


def test_edits_publish_new_snapshots(session):
    seen = []
    unsubscribe = session.subscribe(seen.append)

    session.select_task_type(TaskType.MULTISTOP)
    session.add_stop()
    session.update_stop(0, {"note": "Gate code 1234"})
    session.remove_stop(0)

    assert len(seen) == 4
    assert seen[1].stop_count == 1
    assert seen[2].stops[0].note == "Gate code 1234"
    assert seen[-1] is session.draft

    unsubscribe()
    session.add_stop()
    assert len(seen) == 4


def test_unsubscribe_twice_is_harmless(session):
    seen = []
    unsubscribe = session.subscribe(seen.append)
    keep = session.subscribe(lambda draft: None)

    unsubscribe()
    unsubscribe()

    session.add_stop()
    assert seen == []
    keep()


def test_invalid_stop_edit_keeps_draft(session):
    session.add_stop()
    before = session.draft
    with pytest.raises(StopIndexError):
        session.remove_stop(5)
    assert session.draft is before


def test_stop_identity_in_session(session):
    session.add_stop()
    session.add_stop()
    second = session.draft.stops[1].stop_id

    session.remove_stop(0)
    session.update_stop_by_id(second, {"address": "9 Elm St"})
    assert session.draft.stops[0].address == "9 Elm St"

    session.remove_stop_by_id(second)
    assert session.draft.stops == ()


def test_confirm_without_order_creator(rates, settings):
    session = WizardSession(rates, settings, initial_task_type=TaskType.SEND)
    session.edit(pickup="A", dropoff="B", product_name="Phone", description="Gift")
    for _ in range(4):
        session.advance()
    assert session.step == WizardStep.CONFIRM

    with pytest.raises(SubmissionError):
        session.advance()
    assert session.submitted is None


def test_attach_item_photo(session):
    picker = FakePicker("file:///photos/item.jpg")

    attached = asyncio.run(session.attach_photo(picker))

    assert attached is True
    assert session.draft.item_photo == "file:///photos/item.jpg"
    options = picker.requests[0]
    assert options.media_type == "images"
    assert options.allows_editing is True
    assert options.aspect == (4, 3)
    assert options.quality == 0.8


def test_attach_stop_photo(session):
    session.add_stop()
    picker = FakePicker("file:///photos/stop.jpg")

    assert asyncio.run(session.attach_photo(picker, stop_index=0)) is True
    assert session.draft.stops[0].item_photo == "file:///photos/stop.jpg"
    assert picker.requests[0].quality == 1.0


def test_cancelled_photo_leaves_draft(session):
    before = session.draft
    assert asyncio.run(session.attach_photo(FakePicker(None))) is False
    assert session.draft is before


def test_photo_for_missing_stop_fails_before_prompting(session):
    picker = FakePicker("file:///photos/stop.jpg")
    with pytest.raises(StopIndexError):
        asyncio.run(session.attach_photo(picker, stop_index=0))
    assert picker.requests == []


class EditingPicker(FakePicker):
    """A picker that lets the draft change while the photo library is open."""

    def __init__(self, result, during_pick):
        super().__init__(result)
        self.during_pick = during_pick

    async def pick_image(self, options):
        self.during_pick()
        return await super().pick_image(options)


def test_stop_photo_follows_stop_after_reorder(session):
    """Removing an earlier stop mid-pick still puts the photo on the chosen stop."""
    session.add_stop()
    session.add_stop()
    chosen = session.draft.stops[1].stop_id
    picker = EditingPicker("file:///photos/stop.jpg", lambda: session.remove_stop(0))

    assert asyncio.run(session.attach_photo(picker, stop_index=1)) is True

    assert session.draft.stop_count == 1
    assert session.draft.stops[0].stop_id == chosen
    assert session.draft.stops[0].item_photo == "file:///photos/stop.jpg"


def test_stop_photo_dropped_when_stop_removed(session):
    session.add_stop()
    session.add_stop()
    picker = EditingPicker("file:///photos/stop.jpg", lambda: session.remove_stop(0))

    assert asyncio.run(session.attach_photo(picker, stop_index=0)) is False

    assert session.draft.stop_count == 1
    assert session.draft.stops[0].item_photo is None
