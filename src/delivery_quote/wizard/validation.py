"""
Step validation for the order wizard.

Incomplete drafts are not errors: a step whose required fields are empty
simply cannot advance until they are filled.
"""
from enum import IntEnum

from ..engine.models import Draft


class WizardStep(IntEnum):
    TASK_TYPE = 1
    ADDRESSES = 2
    PACKAGE = 3
    SERVICE = 4
    PAYMENT = 5
    CONFIRM = 6


# Progress displays show seven segments; the last one lights up after submission
PROGRESS_STEPS = 7


def _blank(value) -> bool:
    return not (value or "").strip()


def missing_fields(step: int, draft: Draft) -> list[str]:
    """Names of the draft fields that keep a step from advancing."""
    step = WizardStep(step)
    missing = []

    if step == WizardStep.TASK_TYPE:
        if draft.task_type is None:
            missing.append("task_type")

    elif step == WizardStep.ADDRESSES:
        if _blank(draft.pickup):
            missing.append("pickup")
        if draft.is_multistop:
            missing.extend(
                f"stops[{i}].address" for i, stop in enumerate(draft.stops) if _blank(stop.address)
            )
        elif _blank(draft.dropoff):
            missing.append("dropoff")

    elif step == WizardStep.PACKAGE:
        if draft.is_multistop:
            if not draft.stops:
                missing.append("stops")
            missing.extend(
                f"stops[{i}].product_name" for i, stop in enumerate(draft.stops) if _blank(stop.product_name)
            )
        else:
            if _blank(draft.product_name):
                missing.append("product_name")
            if _blank(draft.description):
                missing.append("description")

    # Service, payment and confirm steps never block
    return missing


def can_advance(step: int, draft: Draft) -> bool:
    """Whether the wizard may leave the given step for the next one."""
    return not missing_fields(step, draft)


def can_go_back(step: int) -> bool:
    """Going back is always allowed; from step 1 it exits the wizard."""
    WizardStep(step)
    return True
