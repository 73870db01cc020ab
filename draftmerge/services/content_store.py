"""On-disk storage of document HTML bodies.

Layout: ``<data_root>/<manuscript_id>/docs/<doc_id>.html``. Writes are
atomic (temp file, fsync, rename, fsync of the directory).
"""
from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Optional

from draftmerge.core.errors import InvalidInputError, StorageError
from draftmerge.services.base_service import BaseService


def validate_path_segment(segment: str) -> None:
    """Reject ids that could escape their directory."""
    if not segment or "/" in segment or "\\" in segment or ".." in segment:
        raise InvalidInputError("Invalid path segment", field="path_segment", value=segment)


class ContentStore(BaseService):
    """Reads and writes document bodies under the configured data root."""

    def __init__(self, root: Optional[Path] = None):
        super().__init__()
        self._root = root

    @property
    def root(self) -> Path:
        return self._root or self.settings.data_path

    def manuscript_dir(self, manuscript_id: str) -> Path:
        validate_path_segment(manuscript_id)
        return self.root / manuscript_id

    def content_path(self, manuscript_id: str, doc_id: str) -> Path:
        validate_path_segment(doc_id)
        return self.manuscript_dir(manuscript_id) / "docs" / f"{doc_id}.html"

    def ensure_manuscript_dirs(self, manuscript_id: str) -> None:
        base = self.manuscript_dir(manuscript_id)
        (base / "docs").mkdir(parents=True, exist_ok=True)
        (base / "snapshots").mkdir(parents=True, exist_ok=True)

    def read(self, manuscript_id: str, doc_id: str) -> Optional[str]:
        path = self.content_path(manuscript_id, doc_id)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    # The store doubles as the collector's content reader
    __call__ = read

    def write(self, manuscript_id: str, doc_id: str, html: str) -> None:
        path = self.content_path(manuscript_id, doc_id)
        try:
            self.ensure_manuscript_dirs(manuscript_id)
            _write_file_atomic(path, html)
        except OSError as exc:
            raise StorageError(str(exc), operation="write_content") from exc

    def remove_manuscript(self, manuscript_id: str) -> None:
        """Delete every content file of a manuscript."""
        base = self.manuscript_dir(manuscript_id)
        if base.exists():
            shutil.rmtree(base)
            self.logger.debug("manuscript_content_removed", manuscript_id=manuscript_id)


def _write_file_atomic(path: Path, content: str) -> None:
    tmp_path = path.with_name(path.name + ".tmp")
    with open(tmp_path, "w", encoding="utf-8") as handle:
        handle.write(content)
        handle.flush()
        os.fsync(handle.fileno())
    os.replace(tmp_path, path)

    # Make the rename itself durable
    dir_fd = os.open(path.parent, os.O_RDONLY)
    try:
        os.fsync(dir_fd)
    finally:
        os.close(dir_fd)
