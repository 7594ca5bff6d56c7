"""Local-disk storage for task attachment blobs."""

from __future__ import annotations

import logging
import re
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class FileStorage:
    """Stores blobs under <root>/<task_id>/ and hands back root-relative paths."""

    def __init__(self, root: str | None = None) -> None:
        if root is None:
            from taskbot.config import settings
            root = settings.STORAGE_PATH

        self._root = Path(root)
        self._root.mkdir(parents=True, exist_ok=True)

    def save(self, task_id: int, file_name: str, content: bytes) -> str:
        """Write content and return its path relative to the storage root."""
        safe_name = _UNSAFE_CHARS.sub("_", Path(file_name).name) or "file"
        relative = Path(str(task_id)) / f"{uuid.uuid4().hex}-{safe_name}"
        target = self._root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        logger.debug("Stored %d bytes at %s", len(content), target)
        return relative.as_posix()

    def path_for(self, relative: str) -> Path:
        return self._root / relative

    def exists(self, relative: str) -> bool:
        return self.path_for(relative).is_file()

    def delete(self, relative: str) -> None:
        """Remove a blob. A blob that is already gone is not an error."""
        target = self.path_for(relative)
        target.unlink(missing_ok=True)
        try:
            target.parent.rmdir()
        except OSError:
            pass  # directory still holds other blobs
