"""
File storage abstraction.

Provides a simple interface for storing exported subtitle PNGs.
Currently uses local filesystem, can be extended to other backends.
"""
from pathlib import Path
from typing import Optional
import uuid


class FileStorage:
    """
    Local file storage implementation.

    Files are organized as:
    - media/exports/  - Exported PNGs
    """

    def __init__(self, media_root: str = "media"):
        self.media_root = Path(media_root)
        self.media_root.mkdir(parents=True, exist_ok=True)

    def get_exports_dir(self) -> Path:
        """Get the exports directory."""
        path = self.media_root / "exports"
        path.mkdir(parents=True, exist_ok=True)
        return path

    def save_export(self, data: bytes, filename: Optional[str] = None) -> str:
        """
        Save an exported PNG.

        Args:
            data: Encoded PNG bytes
            filename: Download filename; only its final component is used

        Returns:
            Relative path to the saved export
        """
        name = Path(filename).name if filename else f"{uuid.uuid4()}.png"
        file_path = self.get_exports_dir() / name
        file_path.write_bytes(data)
        return str(file_path.relative_to(self.media_root))

    def get_absolute_path(self, relative_path: str) -> Path:
        """Convert a relative path to absolute."""
        return self.media_root / relative_path

    def file_exists(self, relative_path: str) -> bool:
        """Check if a file exists."""
        return (self.media_root / relative_path).exists()
