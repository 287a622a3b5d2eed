"""
Local file storage for document attachments.

One file per document, named after the document ID, under
``STORAGE_DIR``.
"""

from __future__ import annotations

import logging
import mimetypes
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from uuid import UUID

from fastapi import UploadFile
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from promotor.core.config import settings
from promotor.core.exceptions import InvalidInputError, UploadTooLargeError
from promotor.core.metrics import record_document_upload

logger = logging.getLogger(__name__)

_PENDING_FILES_KEY = "pending_document_files"


@dataclass(frozen=True, slots=True)
class UploadedFile:
    """File received from a client, fully read into memory."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


async def read_upload(file: UploadFile, *, max_bytes: int | None = None) -> UploadedFile:
    """
    Read a multipart upload.

    The content type falls back to a guess from the file name.

    Args:
        file: Starlette upload
        max_bytes: Size limit (``STORAGE_MAX_UPLOAD_MB`` by default)

    Returns:
        UploadedFile with the raw bytes

    Raises:
        InvalidInputError: The upload has no file name
        UploadTooLargeError: The file exceeds the limit
    """
    if not file.filename:
        raise InvalidInputError("Uploaded file has no name", field="file")

    limit = max_bytes if max_bytes is not None else settings.storage.max_upload_bytes
    data = await file.read()
    if len(data) > limit:
        raise UploadTooLargeError(len(data), limit)

    content_type = file.content_type or ""
    if not content_type or content_type == "application/octet-stream":
        content_type = mimetypes.guess_type(file.filename)[0] or "application/octet-stream"

    return UploadedFile(filename=file.filename, content_type=content_type, data=data)


class _PendingFiles:
    """File changes waiting for the session's transaction to end."""

    def __init__(self) -> None:
        self.written: list[Path] = []
        self.removed: list[Path] = []

    def on_commit(self, session: Session) -> None:
        for path in self.removed:
            path.unlink(missing_ok=True)
        if self.removed:
            logger.debug("Removed %d document files after commit", len(self.removed))
        self.written.clear()
        self.removed.clear()

    def on_rollback(self, session: Session) -> None:
        for path in self.written:
            path.unlink(missing_ok=True)
        if self.written:
            logger.debug("Discarded %d document files after rollback", len(self.written))
        self.written.clear()
        self.removed.clear()


def _pending_files(session: AsyncSession) -> _PendingFiles:
    """Per-session file changes, hooked to its commit and rollback."""
    pending = session.info.get(_PENDING_FILES_KEY)
    if pending is None:
        pending = _PendingFiles()
        session.info[_PENDING_FILES_KEY] = pending
        event.listen(session.sync_session, "after_commit", pending.on_commit)
        event.listen(session.sync_session, "after_rollback", pending.on_rollback)
    return pending


class LocalFileStore:
    """Document files on the local disk.

    When a session is passed, file changes follow its transaction: new files
    are removed again on rollback, and deletions wait for the commit.
    """

    def __init__(self, base_dir: str | Path | None = None) -> None:
        self.base_dir = Path(base_dir or settings.storage.dir)

    def path_for(self, document_id: UUID) -> Path:
        """Location of a document's file."""
        return self.base_dir / str(document_id)

    def save(
        self,
        document_id: UUID,
        upload: UploadedFile,
        *,
        source: str = "upload",
        session: AsyncSession | None = None,
    ) -> Path:
        """
        Write a document's file, replacing any previous one.

        Args:
            document_id: Owning document
            upload: File content
            source: Label for the upload metrics (upload, scan, action, budget)
            session: Transaction the document row belongs to

        Returns:
            Path of the stored file
        """
        self.base_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(document_id)
        path.write_bytes(upload.data)
        if session is not None:
            _pending_files(session).written.append(path)

        record_document_upload(source, upload.size)
        logger.debug("Stored %d bytes for document %s", upload.size, document_id)
        return path

    def exists(self, document_id: UUID) -> bool:
        return self.path_for(document_id).is_file()

    def delete(self, document_id: UUID) -> bool:
        """Remove a document's file. Returns False when there was none."""
        path = self.path_for(document_id)
        if not path.is_file():
            return False
        path.unlink()
        logger.debug("Removed file of document %s", document_id)
        return True

    def delete_on_commit(self, session: AsyncSession, document_ids: Iterable[UUID]) -> None:
        """Remove the documents' files once the session commits."""
        _pending_files(session).removed.extend(self.path_for(d) for d in document_ids)

    def stored_ids(self) -> set[UUID]:
        """IDs of every document with a file on disk."""
        if not self.base_dir.is_dir():
            return set()
        ids = set()
        for path in self.base_dir.iterdir():
            try:
                ids.add(UUID(path.name))
            except ValueError:
                continue
        return ids


_file_store: LocalFileStore | None = None


def get_file_store() -> LocalFileStore:
    """Get or create the file store singleton."""
    global _file_store
    if _file_store is None:
        _file_store = LocalFileStore()
    return _file_store
