"""Storage service for uploaded claim documents on local disk."""

import asyncio
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional
from uuid import uuid4

from fastapi import UploadFile

from claimflow.core.config import settings
from claimflow.core.exceptions import StorageError, ValidationError
from claimflow.utils.logging import get_logger

LOGGER = get_logger(__name__)

_UNSAFE_CHARS = re.compile(r"[^\w.\-]+", re.UNICODE)


@dataclass(frozen=True)
class StoredFile:
    file_name: str
    url: str


def safe_file_name(name: Optional[str]) -> str:
    """Strip directories and unsafe characters from a client-supplied file name."""
    base = Path(name or "").name.strip()
    cleaned = _UNSAFE_CHARS.sub("_", base).strip("._")
    return cleaned or "upload"


class StorageService:
    """Service for saving uploaded files under the configured upload directory.

    Files are served back by the application under ``public_prefix``.
    """

    def __init__(
        self,
        upload_dir: Optional[str] = None,
        public_prefix: Optional[str] = None,
        max_file_size: Optional[int] = None,
    ):
        self.upload_dir = Path(upload_dir or settings.storage.upload_dir)
        self.public_prefix = (public_prefix or settings.storage.public_prefix).rstrip("/")
        self.max_file_size = max_file_size or settings.storage.max_file_size

    async def save(self, file: UploadFile) -> StoredFile:
        """Persist one uploaded file.

        Args:
            file: The uploaded file

        Returns:
            StoredFile with the original file name and its public URL

        Raises:
            ValidationError: If the file exceeds the size limit
            StorageError: If the file cannot be written
        """
        original_name = file.filename or "upload"
        content = await file.read()
        if len(content) > self.max_file_size:
            raise ValidationError(f"File '{original_name}' exceeds the {self.max_file_size} byte limit")

        stored_name = f"{uuid4().hex}_{safe_file_name(original_name)}"
        target = self.upload_dir / stored_name
        try:
            await asyncio.to_thread(self._write, target, content)
        except OSError as e:
            LOGGER.error(
                f"Error writing upload to disk: {e}",
                exc_info=True,
                extra={"file_name": original_name, "path": str(target)},
            )
            raise StorageError(f"Storage upload error: {e}", original_error=e) from e
        finally:
            await file.seek(0)

        LOGGER.info("Stored upload", extra={"file_name": original_name, "stored_as": stored_name})
        return StoredFile(file_name=original_name, url=f"{self.public_prefix}/{stored_name}")

    async def save_many(self, files: Iterable[UploadFile]) -> list[StoredFile]:
        """Persist several uploads in order, skipping empty form parts.

        If one upload fails, the ones already written for this call are removed.
        """
        stored = []
        try:
            for file in files:
                if not file.filename:
                    continue
                stored.append(await self.save(file))
        except (ValidationError, StorageError):
            await self.discard(stored)
            raise
        return stored

    async def discard(self, stored: Iterable[StoredFile]) -> None:
        """Remove previously stored files, e.g. when the request that uploaded them failed."""
        for item in stored:
            target = self.path_for(item.url)
            if target is None:
                continue
            try:
                await asyncio.to_thread(target.unlink, missing_ok=True)
            except OSError as e:
                LOGGER.warning(f"Could not remove stored upload {target}: {e}")
            else:
                LOGGER.info("Discarded upload", extra={"stored_as": target.name})

    def path_for(self, url: str) -> Optional[Path]:
        """Map a public upload URL back to its file, or None for foreign URLs."""
        prefix = f"{self.public_prefix}/"
        if not url.startswith(prefix):
            return None
        name = url[len(prefix):]
        if not name or name != Path(name).name:
            return None
        return self.upload_dir / name

    def _write(self, target: Path, content: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
