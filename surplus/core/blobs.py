"""
core/blobs.py – Blob store for listing images.

BlobStore is the boundary; LocalBlobStore keeps files on disk under
`<media_dir>/<folder>/` and main.py serves them at `<media_url>/`.
"""
import asyncio
import logging
import mimetypes
from pathlib import Path
from uuid import uuid4

from ..models import UploadResult
from .errors import ValidationError

logger = logging.getLogger(__name__)

FOLDER = "surplus_food"
MAX_BYTES = 5 * 1024 * 1024


class BlobStore:
    """Interface: put(bytes) → {url, public_id}."""

    async def put(self, data: bytes, filename: str = "", content_type: str = "") -> UploadResult:
        raise NotImplementedError


class LocalBlobStore(BlobStore):

    def __init__(self, media_dir: str | Path, media_url: str = "/media", folder: str = FOLDER) -> None:
        self._root = Path(media_dir)
        self._base_url = media_url.rstrip("/")
        self._folder = folder

    async def put(self, data: bytes, filename: str = "", content_type: str = "") -> UploadResult:
        if not data:
            raise ValidationError("No file uploaded")
        if len(data) > MAX_BYTES:
            raise ValidationError("File too large")
        ext = self._extension(filename, content_type)
        public_id = f"{self._folder}/{uuid4().hex}"
        path = self._root / f"{public_id}{ext}"
        await asyncio.get_event_loop().run_in_executor(None, self._write, path, data)
        logger.info(f"Stored image {public_id}{ext} ({len(data)} bytes)")
        return UploadResult(url=f"{self._base_url}/{public_id}{ext}", public_id=public_id)

    @staticmethod
    def _extension(filename: str, content_type: str) -> str:
        guessed = content_type or mimetypes.guess_type(filename or "")[0] or ""
        if not guessed.startswith("image/"):
            raise ValidationError("Only image uploads are accepted")
        suffix = Path(filename or "").suffix.lower()
        return suffix or mimetypes.guess_extension(guessed) or ""

    @staticmethod
    def _write(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
