"""
Render session API routes.

Mirrors the interactive editor: upload an image once, then edit parameters
and fetch previews as often as needed, and finally export the PNG.
"""
import logging
from typing import Optional, Union

from fastapi import APIRouter, File, HTTPException, UploadFile
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict, Field

from api.routes.render import png_response
from domain.models import SessionInfo
from services.image_io import EmptyCanvasError, InvalidImageError, encode_png, load_source_image
from services.render_session import (
    RenderSession,
    SessionNotFoundError,
    SessionNotReadyError,
    SessionRegistry,
)
from settings import settings
from storage.file_storage import FileStorage

router = APIRouter()
registry = SessionRegistry(max_sessions=settings.SUBTITLE_MAX_SESSIONS)
storage = FileStorage(settings.SUBTITLE_MEDIA_ROOT)
logger = logging.getLogger(__name__)

RawValue = Optional[Union[int, float, str]]


class SessionResponse(BaseModel):
    session_id: str
    state: str
    width: Optional[int] = None
    height: Optional[int] = None
    canvas_width: Optional[int] = None
    canvas_height: Optional[int] = None
    line_count: Optional[int] = None


class DrawParamsUpdate(BaseModel):
    """Raw editor values; normalization happens in the service layer."""
    model_config = ConfigDict(populate_by_name=True)

    band_height: RawValue = Field(None, alias="bandHeight")
    font_size: RawValue = Field(None, alias="fontSize")
    font_color: Optional[str] = Field(None, alias="fontColor")
    stroke_color: Optional[str] = Field(None, alias="strokeColor")
    stroke_width: RawValue = Field(None, alias="strokeWidth")
    line_gap: RawValue = Field(None, alias="lineGap")
    text: Optional[str] = None


def session_to_response(info: SessionInfo) -> SessionResponse:
    """Convert a SessionInfo to API response."""
    return SessionResponse(
        session_id=info.id,
        state=info.state.value,
        width=info.width,
        height=info.height,
        canvas_width=info.canvas_width,
        canvas_height=info.canvas_height,
        line_count=info.line_count,
    )


def _get_session(session_id: str) -> RenderSession:
    try:
        return registry.get(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")


async def _load_upload(session: RenderSession, image: UploadFile) -> None:
    try:
        source = load_source_image(await image.read())
    except InvalidImageError as e:
        raise HTTPException(status_code=400, detail=str(e))
    with session.lock:
        try:
            session.load_image(source)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=f"Invalid draw parameters: {e}")


@router.post("", response_model=SessionResponse)
async def create_session(image: UploadFile = File(...)):
    """Create a session from an uploaded image and render it with default parameters."""
    session = registry.create()
    try:
        await _load_upload(session, image)
    except HTTPException:
        registry.delete(session.id)
        raise
    return session_to_response(session.info())


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str):
    session = _get_session(session_id)
    return session_to_response(session.info())


@router.put("/{session_id}/image", response_model=SessionResponse)
async def replace_image(session_id: str, image: UploadFile = File(...)):
    """Replace the session's source image and re-render."""
    session = _get_session(session_id)
    await _load_upload(session, image)
    return session_to_response(session.info())


@router.put("/{session_id}/params", response_model=SessionResponse)
async def update_params(session_id: str, data: DrawParamsUpdate):
    """Replace the parameter snapshot and re-render."""
    session = _get_session(session_id)
    with session.lock:
        try:
            session.update_params(data.model_dump(exclude_none=True))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=f"Invalid draw parameters: {e}")
    return session_to_response(session.info())


@router.get("/{session_id}/preview")
async def preview(session_id: str):
    """Latest rendered canvas as PNG."""
    session = _get_session(session_id)
    with session.lock:
        output = session.output
        if output is None:
            raise HTTPException(status_code=409, detail="Session has no rendered image")
        try:
            data = encode_png(output)
        except EmptyCanvasError as e:
            raise HTTPException(status_code=400, detail=str(e))
    return png_response(data, output.width, output.height)


@router.get("/{session_id}/export")
async def export(session_id: str) -> Response:
    """Download the latest render as subtitle-export-<ms>.png."""
    session = _get_session(session_id)
    with session.lock:
        try:
            exported = session.export()
        except SessionNotReadyError as e:
            raise HTTPException(status_code=409, detail=str(e))
        except EmptyCanvasError as e:
            raise HTTPException(status_code=400, detail=str(e))

    if settings.SUBTITLE_SAVE_EXPORTS:
        rel_path = storage.save_export(exported.data, exported.filename)
        logger.info("sessions: saved export %s", rel_path)

    return png_response(exported.data, exported.width, exported.height, filename=exported.filename)


@router.delete("/{session_id}")
async def delete_session(session_id: str):
    if not registry.delete(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return {"status": "deleted", "session_id": session_id}
