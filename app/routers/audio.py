"""Audio streaming endpoint with HTTP byte-range support."""

from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import StreamingResponse

from app.dependencies import CurrentUser, get_audio_content_service, get_current_user
from app.services.audio_content import AudioContentService
from app.services.playback import RangeNotSatisfiable, iter_file_range, parse_range_header, resolve_mime_type

router = APIRouter(prefix="/api/audio", tags=["Audio"])


@router.get("/{content_id}")
def stream_audio(
    content_id: str,
    request: Request,
    user: CurrentUser = Depends(get_current_user),
    service: AudioContentService = Depends(get_audio_content_service),
) -> Response:
    """Stream the stored audio file. Honors ``Range`` with a 206 partial response."""
    content = service.get_content(content_id, user.user_id)
    if not content:
        raise HTTPException(status_code=404, detail="Audio content not found")

    path = Path(content.file_path)
    if not path.is_file():
        raise HTTPException(status_code=404, detail="Audio file not found")

    file_size = path.stat().st_size
    mime_type = resolve_mime_type(content.file_name, content.mime_type)
    headers = {"Accept-Ranges": "bytes", "Cache-Control": "no-cache"}

    try:
        byte_range = parse_range_header(request.headers.get("range"), file_size)
    except RangeNotSatisfiable:
        headers["Content-Range"] = f"bytes */{file_size}"
        return Response(status_code=416, headers=headers)

    if byte_range is None:
        headers["Content-Length"] = str(file_size)
        return StreamingResponse(
            iter_file_range(path, 0, file_size), status_code=200, media_type=mime_type, headers=headers
        )

    headers["Content-Range"] = byte_range.content_range(file_size)
    headers["Content-Length"] = str(byte_range.length)
    return StreamingResponse(
        iter_file_range(path, byte_range.start, byte_range.length),
        status_code=206,
        media_type=mime_type,
        headers=headers,
    )
