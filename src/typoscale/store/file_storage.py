"""Local-disk storage for uploaded design files."""

import hashlib
import secrets
import time
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)

EXTENSIONS = {
    "application/pdf": ".pdf",
    "image/png": ".png",
}


def compute_content_hash(data: bytes) -> str:
    """SHA-256 hex digest of raw uploaded bytes."""
    return hashlib.sha256(data).hexdigest()


class LocalFileStorage:
    """Write uploads under a root directory using generated, collision-free names."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def generate_filename(self, mime_type: str) -> str:
        """Build ``<epoch-ms>-<16 hex chars><ext>``."""
        extension = EXTENSIONS.get(mime_type, ".bin")
        return f"{int(time.time() * 1000)}-{secrets.token_hex(8)}{extension}"

    def save(self, filename: str, data: bytes) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        path = self.path_for(filename)
        path.write_bytes(data)
        logger.info("file_stored", filename=filename, size_bytes=len(data))
        return path

    def read(self, filepath: str | Path) -> bytes:
        return Path(filepath).read_bytes()

    def exists(self, filepath: str | Path) -> bool:
        return Path(filepath).is_file()

    def delete(self, filepath: str | Path) -> None:
        Path(filepath).unlink(missing_ok=True)
        logger.info("file_deleted", filepath=str(filepath))

    def path_for(self, filename: str) -> Path:
        # Names are generated, but guard against traversal in lookups.
        return self.root / Path(filename).name
