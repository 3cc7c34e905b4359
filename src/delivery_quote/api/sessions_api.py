"""
Sessions API - FastAPI router driving order wizard sessions.
"""
from dataclasses import asdict

from fastapi import APIRouter, HTTPException
from fastapi.encoders import jsonable_encoder

from ..errors import StopIndexError, SubmissionError, WizardClosedError
from ..wizard.session import WizardSession
from .schemas import DraftUpdate, SessionCreate, StopUpdate
from .state import sessions

router = APIRouter(prefix="/sessions", tags=["sessions"])


def session_view(session_id: str, session: WizardSession) -> dict:
    """Serializable snapshot of a session for API responses."""
    view = {
        "session_id": session_id,
        "step": int(session.step),
        "progress": session.progress(),
        "closed": session.closed,
        "order_id": session.submitted.order_id if session.submitted else None,
    }
    if session.is_active:
        summary = session.stop_summary
        view.update({
            "draft": asdict(session.draft),
            "can_advance": session.can_advance(),
            "missing_fields": session.missing_fields(),
            "quote": session.quote.as_dict(),
            "stop_warnings": {str(i): w for i, w in session.stop_warnings.items()},
            "stop_summary": asdict(summary),
        })
    if session.submitted:
        view["tracking_url"] = f"/orders/{session.submitted.order_id}"
    return jsonable_encoder(view)


def _get_session(session_id: str) -> WizardSession:
    try:
        return sessions.get(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")


def _run(session_id: str, action):
    """Apply an action to a session, mapping domain errors to HTTP errors."""
    session = _get_session(session_id)
    try:
        action(session)
    except StopIndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except WizardClosedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except SubmissionError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return session_view(session_id, session)


@router.post("")
async def create_session(req: SessionCreate):
    """Open a wizard; a pre-selected task type skips the first step."""
    session_id, session = sessions.create(req.task_type)
    return session_view(session_id, session)


@router.get("/{session_id}")
async def get_session(session_id: str):
    return session_view(session_id, _get_session(session_id))


@router.patch("/{session_id}/draft")
async def update_draft(session_id: str, req: DraftUpdate):
    changes = req.model_dump(exclude_unset=True)
    return _run(session_id, lambda s: s.edit(**changes))


@router.post("/{session_id}/stops")
async def add_stop(session_id: str):
    return _run(session_id, lambda s: s.add_stop())


@router.patch("/{session_id}/stops/{index}")
async def update_stop(session_id: str, index: int, req: StopUpdate):
    changes = req.model_dump(exclude_unset=True)
    return _run(session_id, lambda s: s.update_stop(index, changes))


@router.delete("/{session_id}/stops/{index}")
async def remove_stop(session_id: str, index: int):
    return _run(session_id, lambda s: s.remove_stop(index))


@router.post("/{session_id}/next")
async def next_step(session_id: str):
    """Advance one step; from the confirm step this submits the order."""
    return _run(session_id, lambda s: s.advance())


@router.post("/{session_id}/back")
async def previous_step(session_id: str):
    return _run(session_id, lambda s: s.back())


@router.get("/{session_id}/quote")
async def get_quote(session_id: str):
    session = _get_session(session_id)
    try:
        breakdown = session.quote
    except WizardClosedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {
        **breakdown.as_dict(),
        "fulfillment_mode": breakdown.fulfillment_mode,
        "trace": breakdown.get_trace_text(),
        "rates_hash": breakdown.rates_hash,
    }
