"""
Render orchestration.

`render_subtitles` is the pure entry point: (source image, parameters) in,
fresh raster out. `RenderSession` wraps it with the state an interactive
editor needs (current image, latest parameter snapshot, latest output) and
`SessionRegistry` keeps sessions for the HTTP API.
"""
import logging
import threading
from collections import OrderedDict
from typing import Any, Dict, List, Mapping, Optional

from PIL import Image

from domain.models import DrawParameters, ExportedImage, SessionInfo, SessionState, SourceImage
from services.background_band import synthesize_background_band
from services.canvas_layout import compute_layout, split_lines
from services.compositor import composite
from services.draw_params import normalize_draw_parameters
from services.image_io import export_png

logger = logging.getLogger(__name__)


class SessionNotReadyError(RuntimeError):
    """Raised when exporting from a session that has no image loaded."""


class SessionNotFoundError(KeyError):
    """Raised when a session id is unknown to the registry."""


def render_subtitles(source: Optional[SourceImage], params: DrawParameters) -> Optional[Image.Image]:
    """
    Render subtitle bands for `params.text` beneath `source`.

    Always recomputes everything from the unmodified source; calling it twice
    with the same inputs gives pixel-identical results.

    Returns:
        RGBA canvas, or None when no source image is available.
    """
    if source is None:
        return None
    lines = split_lines(params.text)
    layout = compute_layout(source.width, source.height, params)
    band = synthesize_background_band(source, params.band_height)
    return composite(source, layout, band, params, lines)


def render_from_raw(source: Optional[SourceImage], raw: Optional[Mapping[str, Any]]) -> Optional[Image.Image]:
    """Normalize raw UI values, then render."""
    return render_subtitles(source, normalize_draw_parameters(raw))


class RenderSession:
    """
    One editing session.

    Lifecycle: uninitialized -> loaded (on load_image). A loaded session can
    be re-rendered any number of times and its image replaced wholesale.
    """

    def __init__(self, session_id: Optional[str] = None):
        self.id = session_id or SessionInfo.generate_id()
        self._source: Optional[SourceImage] = None
        self._raw_params: Dict[str, Any] = {}
        self._params: DrawParameters = normalize_draw_parameters(self._raw_params)
        self._output: Optional[Image.Image] = None
        self.lock = threading.Lock()

    @property
    def state(self) -> SessionState:
        return SessionState.LOADED if self._source is not None else SessionState.UNINITIALIZED

    @property
    def source(self) -> Optional[SourceImage]:
        return self._source

    @property
    def params(self) -> DrawParameters:
        return self._params

    @property
    def output(self) -> Optional[Image.Image]:
        return self._output

    def load_image(self, source: SourceImage) -> Optional[Image.Image]:
        """
        Replace the source image and render it with the current parameters.

        Nothing is committed when the render raises; the session keeps its
        previous image and output.
        """
        output = render_subtitles(source, self._params)
        self._source = source
        self._output = output
        logger.info("render_session: %s loaded image %sx%s", self.id, source.width, source.height)
        return output

    def update_params(self, raw: Optional[Mapping[str, Any]]) -> Optional[Image.Image]:
        """
        Replace the parameter snapshot; re-render when an image is loaded.

        The snapshot and output are only replaced once the render succeeds.
        """
        raw_params = dict(raw or {})
        params = normalize_draw_parameters(raw_params)
        output = render_subtitles(self._source, params)
        self._raw_params = raw_params
        self._params = params
        self._output = output
        return output

    def render(self) -> Optional[Image.Image]:
        self._output = render_subtitles(self._source, self._params)
        return self._output

    def export(self, timestamp_ms: Optional[int] = None) -> ExportedImage:
        if self.state is not SessionState.LOADED:
            raise SessionNotReadyError(f"Session {self.id} has no image loaded")
        if self._output is None:
            self.render()
        exported = export_png(self._output, timestamp_ms)
        logger.info(
            "render_session: %s exported %s (%sx%s)",
            self.id,
            exported.filename,
            exported.width,
            exported.height,
        )
        return exported

    def info(self) -> SessionInfo:
        output = self._output
        return SessionInfo(
            id=self.id,
            state=self.state,
            width=self._source.width if self._source else None,
            height=self._source.height if self._source else None,
            canvas_width=output.width if output is not None else None,
            canvas_height=output.height if output is not None else None,
            line_count=self._params.line_count if output is not None else None,
        )


class SessionRegistry:
    """
    Thread-safe in-memory store of render sessions.

    Holds at most `max_sessions`; creating one more evicts the session used
    least recently (get counts as a use).
    """

    def __init__(self, max_sessions: int = 32) -> None:
        self.max_sessions = max(1, max_sessions)
        self._sessions: "OrderedDict[str, RenderSession]" = OrderedDict()
        self._lock = threading.Lock()

    def create(self) -> RenderSession:
        session = RenderSession()
        with self._lock:
            self._sessions[session.id] = session
            while len(self._sessions) > self.max_sessions:
                evicted_id, _ = self._sessions.popitem(last=False)
                logger.info("render_session: evicted idle session %s", evicted_id)
        return session

    def get(self, session_id: str) -> RenderSession:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                self._sessions.move_to_end(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def delete(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def list_ids(self) -> List[str]:
        with self._lock:
            return list(self._sessions)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()
