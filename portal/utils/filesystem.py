from pathlib import Path
from portal.config import settings


def ensure_data_dirs(data_path: Path | None = None) -> Path:
    path = data_path or settings.data_path
    path.mkdir(parents=True, exist_ok=True)
    (path / "uploads").mkdir(exist_ok=True)
    return path


def ensure_uploader_dir(uploader_id: str, data_path: Path | None = None) -> Path:
    path = data_path or settings.data_path
    uploader_dir = path / "uploads" / sanitize_filename(uploader_id)
    uploader_dir.mkdir(parents=True, exist_ok=True)
    return uploader_dir


def sanitize_filename(name: str) -> str:
    keep = set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789._-")
    return "".join(c if c in keep else "_" for c in name)
