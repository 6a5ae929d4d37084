"""Audio content API endpoints."""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, Request, Response, UploadFile

from app.dependencies import (
    CurrentUser,
    get_audio_content_service,
    get_current_user,
    get_gateway,
    get_job_manager,
    get_pipeline,
    get_store,
)
from app.rate_limit import limiter
from app.schemas.audio_content import AudioContentResponse, KeyPointsResponse, ProgressUpdate
from app.schemas.highlight import HighlightResponse
from app.schemas.job import JobResponse
from app.schemas.transcript import TranscriptSegmentResponse
from app.services.ai_gateway import AIGateway, AIGatewayError
from app.services.audio_content import AudioContentService, UploadTooLarge
from app.services.ingestion import IngestionPipeline
from app.services.jobs import JobManager
from app.storage.base import ContentStore
from app.storage.records import AudioContent, SummaryStatus, TranscriptionStatus

logger = logging.getLogger("audiomind")

router = APIRouter(prefix="/api/audio-content", tags=["Audio Content"])


def _get_owned_content(service: AudioContentService, content_id: str, user: CurrentUser) -> AudioContent:
    content = service.get_content(content_id, user.user_id)
    if not content:
        raise HTTPException(status_code=404, detail="Audio content not found")
    return content


def _require_transcript(content: AudioContent) -> str:
    if content.transcription_status != TranscriptionStatus.COMPLETED or not content.transcription_text:
        raise HTTPException(status_code=400, detail="Transcription not available")
    return content.transcription_text


@router.get("", response_model=list[AudioContentResponse])
def list_audio_content(
    user: CurrentUser = Depends(get_current_user),
    store: ContentStore = Depends(get_store),
) -> list[AudioContentResponse]:
    """List the current user's audio, most recently accessed first."""
    return [AudioContentResponse.model_validate(c) for c in store.get_audio_content_by_user(user.user_id)]


@router.get("/search", response_model=list[AudioContentResponse])
def search_audio_content(
    q: str | None = None,
    user: CurrentUser = Depends(get_current_user),
    store: ContentStore = Depends(get_store),
) -> list[AudioContentResponse]:
    """Case-insensitive search over title, source, transcript and summary."""
    if not q:
        raise HTTPException(status_code=400, detail="Search query is required")
    return [AudioContentResponse.model_validate(c) for c in store.search_audio_content(user.user_id, q)]


@router.post("/upload", response_model=AudioContentResponse)
@limiter.limit("20/minute")
async def upload_audio_content(
    request: Request,
    response: Response,
    background_tasks: BackgroundTasks,
    audio_file: UploadFile | None = File(None, alias="audioFile"),
    title: str | None = Form(None),
    source: str | None = Form(None),
    user: CurrentUser = Depends(get_current_user),
    service: AudioContentService = Depends(get_audio_content_service),
    jobs: JobManager = Depends(get_job_manager),
    pipeline: IngestionPipeline = Depends(get_pipeline),
) -> AudioContentResponse:
    """Upload an audio file and start transcription in the background."""
    if audio_file is None or not audio_file.filename:
        raise HTTPException(status_code=400, detail="No audio file provided")

    error = service.validate_upload_metadata(audio_file.content_type)
    if error:
        raise HTTPException(status_code=400, detail=error)

    title = (title or "").strip()
    if not title:
        raise HTTPException(status_code=400, detail="Title is required")

    # Stream directly to disk (single read, with size limit enforcement)
    try:
        file_path, file_size = await service.store_file(user.user_id, audio_file)
    except UploadTooLarge as e:
        raise HTTPException(status_code=400, detail=str(e)) from None

    content = service.create_content(
        user_id=user.user_id,
        title=title,
        source=(source or "").strip() or None,
        file_name=audio_file.filename,
        file_path=file_path,
        file_size=file_size,
        mime_type=audio_file.content_type,
    )

    # Runs after the response is sent
    job = jobs.create(content.id, user.user_id)
    background_tasks.add_task(jobs.run, job, pipeline.run)
    response.headers["X-Job-Id"] = job.id

    return AudioContentResponse.model_validate(content)


@router.get("/{content_id}", response_model=AudioContentResponse)
def get_audio_content(
    content_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: AudioContentService = Depends(get_audio_content_service),
) -> AudioContentResponse:
    """Get a single audio item by ID."""
    return AudioContentResponse.model_validate(_get_owned_content(service, content_id, user))


@router.delete("/{content_id}")
def delete_audio_content(
    content_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: AudioContentService = Depends(get_audio_content_service),
    jobs: JobManager = Depends(get_job_manager),
) -> dict:
    """Delete an audio item with its file, highlights and transcript."""
    content = _get_owned_content(service, content_id, user)
    service.delete_content(content, jobs)
    return {"detail": "Audio content deleted"}


@router.patch("/{content_id}/progress", response_model=AudioContentResponse)
def update_progress(
    content_id: str,
    body: ProgressUpdate,
    user: CurrentUser = Depends(get_current_user),
    service: AudioContentService = Depends(get_audio_content_service),
) -> AudioContentResponse:
    """Save the playback position."""
    updated = service.update_progress(content_id, user.user_id, body.progress)
    if not updated:
        raise HTTPException(status_code=404, detail="Audio content not found")
    return AudioContentResponse.model_validate(updated)


@router.get("/{content_id}/transcript", response_model=list[TranscriptSegmentResponse])
def get_transcript(
    content_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: AudioContentService = Depends(get_audio_content_service),
) -> list[TranscriptSegmentResponse]:
    """Transcript segments in playback order."""
    content = _get_owned_content(service, content_id, user)
    return [TranscriptSegmentResponse.model_validate(s) for s in service.store.get_transcript_segments(content.id)]


@router.get("/{content_id}/highlights", response_model=list[HighlightResponse])
def get_highlights(
    content_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: AudioContentService = Depends(get_audio_content_service),
) -> list[HighlightResponse]:
    """Highlights of one item ordered by start time."""
    content = _get_owned_content(service, content_id, user)
    return [HighlightResponse.model_validate(h) for h in service.store.get_highlights_by_audio_content(content.id)]


@router.get("/{content_id}/jobs", response_model=list[JobResponse])
def get_jobs(
    content_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: AudioContentService = Depends(get_audio_content_service),
    jobs: JobManager = Depends(get_job_manager),
) -> list[JobResponse]:
    """Processing jobs started for one item."""
    content = _get_owned_content(service, content_id, user)
    return [JobResponse.model_validate(j) for j in jobs.for_content(content.id)]


@router.post("/{content_id}/summary", response_model=AudioContentResponse)
async def generate_summary(
    content_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: AudioContentService = Depends(get_audio_content_service),
    gateway: AIGateway = Depends(get_gateway),
) -> AudioContentResponse:
    """Generate (or regenerate) the AI summary and keywords."""
    content = _get_owned_content(service, content_id, user)
    text = _require_transcript(content)

    try:
        result = await gateway.generate_summary(text)
    except AIGatewayError:
        logger.exception("Summary generation failed for content %s", content_id)
        raise HTTPException(status_code=500, detail="Failed to generate summary") from None

    updated = service.store.update_audio_content(
        content_id,
        ai_summary=result.summary,
        keywords=result.keywords,
        summary_status=SummaryStatus.COMPLETED,
        summary_error=None,
    )
    if not updated:
        raise HTTPException(status_code=404, detail="Audio content not found")
    return AudioContentResponse.model_validate(updated)


@router.post("/{content_id}/key-points", response_model=KeyPointsResponse)
async def extract_key_points(
    content_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: AudioContentService = Depends(get_audio_content_service),
    gateway: AIGateway = Depends(get_gateway),
) -> KeyPointsResponse:
    """Extract key points from the transcript. Nothing is stored."""
    content = _get_owned_content(service, content_id, user)
    text = _require_transcript(content)

    try:
        key_points = await gateway.extract_key_points(text)
    except AIGatewayError:
        logger.exception("Key point extraction failed for content %s", content_id)
        raise HTTPException(status_code=500, detail="Failed to extract key points") from None

    return KeyPointsResponse(key_points=key_points)
