"""Local file store for uploaded bytes.

The review core never reads these files; it only keeps the relative
location returned by ``store_file``.
"""
import os
from contextlib import contextmanager
from pathlib import Path

from portal.config import settings
from portal.errors import NotFound
from portal.utils.filesystem import ensure_uploader_dir, sanitize_filename
from portal.utils.hashing import sha256_bytes


def _target(uploader_id: str, filename: str, content: bytes, path: Path) -> tuple[Path, str]:
    stored_name = f"{sha256_bytes(content)[:8]}_{sanitize_filename(filename)}"
    uploader_dir = ensure_uploader_dir(uploader_id, path)
    return uploader_dir / stored_name, f"uploads/{uploader_dir.name}/{stored_name}"


def store_file(uploader_id: str, filename: str, content: bytes, data_path: Path | None = None) -> str:
    """Store an upload immutably. Returns the location relative to the data directory."""
    file_path, location = _target(uploader_id, filename, content, data_path or settings.data_path)
    if not file_path.exists():
        file_path.write_bytes(content)
        os.chmod(file_path, 0o444)
    return location


@contextmanager
def staged_file(uploader_id: str, filename: str, content: bytes, data_path: Path | None = None):
    """Store an upload for the block; a file written here is removed again if the block raises."""
    path = data_path or settings.data_path
    file_path, _ = _target(uploader_id, filename, content, path)
    created = not file_path.exists()
    location = store_file(uploader_id, filename, content, path)
    try:
        yield location
    except BaseException:
        if created:
            file_path.unlink(missing_ok=True)
        raise


def resolve_location(location: str, data_path: Path | None = None) -> Path:
    path = (data_path or settings.data_path).resolve()
    full_path = (path / location).resolve()
    if path not in full_path.parents or not full_path.is_file():
        raise NotFound("Stored file missing from data directory")
    return full_path
