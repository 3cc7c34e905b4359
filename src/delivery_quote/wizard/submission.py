"""
Submission Assembler - Builds the finished order at confirmation.

For multi-stop orders the first stop stands in for the "primary" item;
otherwise the single-item fields do. The drop-off contact is flattened to
one string for Send and Errand orders only.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from ..errors import SubmissionError
from ..engine.models import Draft, SubmissionPayload
from .collaborators import OrderCreator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmittedOrder:
    order_id: str
    payload: SubmissionPayload


def primary_item(draft: Draft) -> tuple[str, str, Optional[str]]:
    """Return (product_name, description, photo) of the primary item."""
    if draft.is_multistop and draft.stops:
        first = draft.stops[0]
        return first.product_name, first.description, first.item_photo
    return draft.product_name, draft.description, draft.item_photo


def format_dropoff_contact(draft: Draft) -> str:
    if draft.is_multistop:
        return ""
    if draft.dropoff_contact_phone:
        return f"{draft.dropoff_contact_name}, {draft.dropoff_contact_phone}"
    return draft.dropoff_contact_name


def build_submission(draft: Draft, price: int, eta: str = "15 min") -> SubmissionPayload:
    """Assemble the payload handed to the order creator."""
    if draft.task_type is None:
        raise SubmissionError("Cannot submit a draft without a task type")

    product_name, description, photo = primary_item(draft)

    return SubmissionPayload(
        task_type=draft.task_type,
        pickup=draft.pickup,
        dropoff=draft.dropoff,
        pickup_contact=draft.pickup_contact,
        dropoff_contact=format_dropoff_contact(draft),
        stops=draft.stops,
        product_name=product_name,
        description=description,
        item_photo=photo,
        time_preference=draft.time_preference,
        scheduled_date=draft.scheduled_date,
        payment_method=draft.payment_method,
        price=price,
        eta=eta,
    )


def submit(draft: Draft, order_creator: OrderCreator, price: int, eta: str = "15 min") -> SubmittedOrder:
    """
    Build the payload, create the order and return it with its identifier.

    Raises:
        SubmissionError: if the creator returns no order id
    """
    payload = build_submission(draft, price, eta)
    created = order_creator.create_task(payload.to_dict())

    order_id = created.get("id") if created else None
    if not order_id:
        raise SubmissionError("Order creator returned no order id")

    logger.info(
        "Submitted %s order %s with %d stop(s) at %d",
        payload.task_type.value, order_id, len(payload.stops), payload.price,
    )
    return SubmittedOrder(order_id=str(order_id), payload=payload)
