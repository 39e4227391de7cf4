"""FastAPI router for undo/redo on the editor session."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from parcelmap.history.session import EditorSession

router = APIRouter()


class HistorySummary(BaseModel):
    """Undo/redo availability for the current session."""

    can_undo: bool
    can_redo: bool
    undo_depth: int
    redo_depth: int
    equality: str
    changed: bool = False


def _summary(session: EditorSession, changed: bool = False) -> HistorySummary:
    history = session.history
    return HistorySummary(
        can_undo=history.can_undo,
        can_redo=history.can_redo,
        undo_depth=len(history.past),
        redo_depth=len(history.future),
        equality=history.equality.value,
        changed=changed,
    )


def _session(request: Request) -> EditorSession:
    session = getattr(request.app.state, "editor_session", None)
    if session is None:
        raise HTTPException(status_code=503, detail="Editor session not available")
    return session


@router.get("/api/history", response_model=HistorySummary)
async def get_history(request: Request) -> HistorySummary:
    return _summary(_session(request))


@router.post("/api/history/undo", response_model=HistorySummary)
async def undo(request: Request) -> HistorySummary:
    """Step back one edit. A no-op when there is nothing to undo."""
    session = _session(request)
    return _summary(session, changed=session.undo())


@router.post("/api/history/redo", response_model=HistorySummary)
async def redo(request: Request) -> HistorySummary:
    """Re-apply the next undone edit. A no-op when there is nothing to redo."""
    session = _session(request)
    return _summary(session, changed=session.redo())
