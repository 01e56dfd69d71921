import os
import posixpath
import sys
import time
import uuid
from dataclasses import dataclass
from typing import List, Optional

from dotenv import load_dotenv
from werkzeug.utils import secure_filename

from errors import UploadFailed

load_dotenv()

UPLOAD_DIR = os.getenv("UPLOAD_DIR", "upload")
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "")

SCREENSHOT_BUCKET = "developer-portfolio"
RESUME_BUCKET = "resumes"

IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp"}
RESUME_EXTENSIONS = {"pdf", "doc", "docx"}

MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))


def file_extension(filename: str) -> str:
    if "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1].lower()


def allowed_file(filename, allowed):
    return file_extension(filename) in allowed


@dataclass
class StoredFile:
    url: str
    name: str


class BlobStore:
    """Bucketed file storage on local disk, served back under /uploads."""

    def __init__(self, root: str = UPLOAD_DIR, public_base_url: str = PUBLIC_BASE_URL):
        self.root = root
        self.public_base_url = public_base_url.rstrip("/")
        os.makedirs(self.root, exist_ok=True)

    def _full_path(self, bucket: str, path: str) -> str:
        full = os.path.normpath(os.path.join(self.root, bucket, path))
        bucket_root = os.path.normpath(os.path.join(self.root, bucket))
        if not full.startswith(bucket_root + os.sep):
            raise UploadFailed(f"Invalid upload path: {path}")
        return full

    def upload_blob(self, bucket: str, path: str, data: bytes) -> None:
        full = self._full_path(bucket, path)
        try:
            os.makedirs(os.path.dirname(full), exist_ok=True)
            with open(full, "wb") as f:
                f.write(data)
        except OSError as e:
            print(f"⚠️ Upload to {bucket}/{path} failed: {e}", file=sys.stderr, flush=True)
            raise UploadFailed() from e

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self.public_base_url}/uploads/{bucket}/{path}"

    def exists(self, bucket: str, path: str) -> bool:
        return os.path.isfile(self._full_path(bucket, path))

    def path_for_url(self, bucket: str, url: str) -> Optional[str]:
        """Bucket-relative path of a public URL this store issued, else None."""
        prefix = self.get_public_url(bucket, "")
        if not url or not url.startswith(prefix):
            return None
        path = posixpath.normpath(url[len(prefix):])
        if path in (".", "") or path.startswith(("..", "/")):
            return None
        return path


def _unique_name(filename: str) -> str:
    ext = file_extension(filename)
    stem = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"
    return f"{stem}.{ext}" if ext else stem


def _store(store: BlobStore, bucket: str, prefix: Optional[str], filename: str,
           data: bytes, allowed) -> StoredFile:
    if not filename or not allowed_file(filename, allowed):
        raise UploadFailed(f"Failed to upload {filename or 'file'}: unsupported file type")
    if not data:
        raise UploadFailed(f"Failed to upload {filename}: file is empty")
    if len(data) > MAX_UPLOAD_BYTES:
        raise UploadFailed(f"Failed to upload {filename}: file is too large")

    name = _unique_name(secure_filename(filename) or filename)
    path = f"{prefix}/{name}" if prefix else name
    try:
        store.upload_blob(bucket, path, data)
    except UploadFailed as e:
        raise UploadFailed(f"Failed to upload {filename}") from e
    return StoredFile(url=store.get_public_url(bucket, path), name=filename)


def upload_screenshot(store: BlobStore, identity_id: str, filename: str, data: bytes) -> StoredFile:
    """Store one portfolio screenshot under the identity's own folder."""
    return _store(store, SCREENSHOT_BUCKET, identity_id, filename, data, IMAGE_EXTENSIONS)


def upload_screenshots(store: BlobStore, identity_id: str, files):
    """Upload each (filename, bytes) pair; a failure is recorded and the rest continue.

    Returns (uploaded, failed) where failed holds (filename, message) pairs.
    """
    uploaded: List[StoredFile] = []
    failed = []
    for filename, data in files:
        try:
            uploaded.append(upload_screenshot(store, identity_id, filename, data))
        except UploadFailed as e:
            failed.append((filename, e.message))
    return uploaded, failed


def upload_resume(store: BlobStore, filename: str, data: bytes) -> StoredFile:
    return _store(store, RESUME_BUCKET, None, filename, data, RESUME_EXTENSIONS)


_default_store = None


def get_blob_store() -> BlobStore:
    global _default_store
    if _default_store is None:
        _default_store = BlobStore()
    return _default_store
