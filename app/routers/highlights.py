"""Highlight API endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from app.dependencies import CurrentUser, get_current_user, get_store
from app.schemas.highlight import HighlightCreate, HighlightResponse, HighlightUpdate
from app.storage.base import ContentStore
from app.storage.records import Highlight

router = APIRouter(prefix="/api/highlights", tags=["Highlights"])


def _get_owned_highlight(store: ContentStore, highlight_id: str, user: CurrentUser) -> Highlight:
    highlight = store.get_highlight(highlight_id)
    if not highlight or highlight.user_id != user.user_id:
        raise HTTPException(status_code=404, detail="Highlight not found")
    return highlight


@router.get("", response_model=list[HighlightResponse])
def list_highlights(
    user: CurrentUser = Depends(get_current_user),
    store: ContentStore = Depends(get_store),
) -> list[HighlightResponse]:
    """All highlights of the current user, newest first."""
    return [HighlightResponse.model_validate(h) for h in store.get_highlights_by_user(user.user_id)]


@router.post("", response_model=HighlightResponse)
def create_highlight(
    body: HighlightCreate,
    user: CurrentUser = Depends(get_current_user),
    store: ContentStore = Depends(get_store),
) -> HighlightResponse:
    """Save a highlight on one of the user's audio items."""
    content = store.get_audio_content(body.audio_content_id)
    if not content or content.user_id != user.user_id:
        raise HTTPException(status_code=404, detail="Audio content not found")

    highlight = store.create_highlight(
        user_id=user.user_id,
        audio_content_id=body.audio_content_id,
        text=body.text,
        start_time=body.start_time,
        end_time=body.end_time,
        color=body.color,
        note=body.note,
    )
    return HighlightResponse.model_validate(highlight)


@router.patch("/{highlight_id}", response_model=HighlightResponse)
def update_highlight(
    highlight_id: str,
    body: HighlightUpdate,
    user: CurrentUser = Depends(get_current_user),
    store: ContentStore = Depends(get_store),
) -> HighlightResponse:
    """Change the text, time range, color or note of a highlight."""
    highlight = _get_owned_highlight(store, highlight_id, user)
    # Only the note may be cleared with null
    updates = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None or k == "note"}

    start = updates.get("start_time", highlight.start_time)
    end = updates.get("end_time", highlight.end_time)
    if end < start:
        raise HTTPException(status_code=400, detail="endTime must not be before startTime")

    updated = store.update_highlight(highlight_id, **updates)
    if not updated:
        raise HTTPException(status_code=404, detail="Highlight not found")
    return HighlightResponse.model_validate(updated)


@router.delete("/{highlight_id}")
def delete_highlight(
    highlight_id: str,
    user: CurrentUser = Depends(get_current_user),
    store: ContentStore = Depends(get_store),
) -> dict:
    """Delete a highlight."""
    _get_owned_highlight(store, highlight_id, user)
    if not store.delete_highlight(highlight_id):
        raise HTTPException(status_code=404, detail="Highlight not found")
    return {"detail": "Highlight deleted successfully"}
