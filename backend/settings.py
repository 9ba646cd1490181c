import os

from domain.models import DEFAULT_FONT_COLOR, DEFAULT_STROKE_COLOR

# Basic settings helper to read environment configuration.


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


class Settings:
    def __init__(self) -> None:
        self.SUBTITLE_FONT_PATH: str | None = os.getenv("SUBTITLE_FONT_PATH") or None
        self.SUBTITLE_MEDIA_ROOT: str = os.getenv("SUBTITLE_MEDIA_ROOT", "media")
        self.SUBTITLE_SAVE_EXPORTS: bool = _as_bool(os.getenv("SUBTITLE_SAVE_EXPORTS"), False)
        self.SUBTITLE_DEFAULT_FONT_COLOR: str = os.getenv("SUBTITLE_DEFAULT_FONT_COLOR", DEFAULT_FONT_COLOR)
        self.SUBTITLE_DEFAULT_STROKE_COLOR: str = os.getenv("SUBTITLE_DEFAULT_STROKE_COLOR", DEFAULT_STROKE_COLOR)
        self.SUBTITLE_MAX_SESSIONS: int = int(os.getenv("SUBTITLE_MAX_SESSIONS", "32"))


settings = Settings()
