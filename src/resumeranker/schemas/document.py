from __future__ import annotations

import mimetypes
from pathlib import Path

from pydantic import BaseModel, ConfigDict

PDF_MEDIA_TYPE = "application/pdf"


class DocumentItem(BaseModel):
    """One uploaded document as handed to the pipeline."""

    path: Path
    display_name: str
    media_type: str = PDF_MEDIA_TYPE
    size: int = 0
    temporary: bool = False

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_path(cls, path: str | Path, *, temporary: bool = False) -> "DocumentItem":
        """Describe a file on disk, guessing its media type from the name."""
        path = Path(path)
        media_type, _ = mimetypes.guess_type(path.name)
        size = path.stat().st_size if path.exists() else 0
        return cls(
            path=path,
            display_name=path.name,
            media_type=media_type or "application/octet-stream",
            size=size,
            temporary=temporary,
        )
