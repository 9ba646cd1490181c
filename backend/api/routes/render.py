"""
Stateless render API route.

One request carries the image and every styling field; the response is the
rendered PNG.
"""
import logging

from fastapi import APIRouter, File, HTTPException, Request, UploadFile
from fastapi.responses import Response

from services.draw_params import normalize_draw_parameters
from services.image_io import EmptyCanvasError, InvalidImageError, export_png, load_source_image
from services.render_session import render_subtitles

router = APIRouter()
logger = logging.getLogger(__name__)


def png_response(data: bytes, width: int, height: int, filename: str | None = None) -> Response:
    """Build an image/png response, as an attachment when filename is given."""
    headers = {
        "X-Canvas-Width": str(width),
        "X-Canvas-Height": str(height),
    }
    if filename:
        headers["Content-Disposition"] = f'attachment; filename="{filename}"'
    return Response(content=data, media_type="image/png", headers=headers)


@router.post("")
async def render_image(request: Request, image: UploadFile = File(...), download: bool = False):
    """
    Render subtitle bands beneath an uploaded image.

    Styling fields are read from the same multipart form, using either the
    snake_case names (band_height) or the editor's camelCase names
    (bandHeight). Missing or unparseable values take their defaults.
    """
    form = await request.form()
    raw = {key: value for key, value in form.items() if key != "image" and isinstance(value, str)}

    try:
        source = load_source_image(await image.read())
    except InvalidImageError as e:
        raise HTTPException(status_code=400, detail=str(e))

    params = normalize_draw_parameters(raw)
    try:
        canvas = render_subtitles(source, params)
    except ValueError as e:
        # Pillow rejects unknown color strings while drawing
        raise HTTPException(status_code=400, detail=f"Invalid draw parameters: {e}")

    try:
        exported = export_png(canvas)
    except EmptyCanvasError as e:
        raise HTTPException(status_code=400, detail=str(e))
    logger.info(
        "render: %s lines -> %sx%s",
        params.line_count,
        exported.width,
        exported.height,
    )
    return png_response(
        exported.data,
        exported.width,
        exported.height,
        filename=exported.filename if download else None,
    )
