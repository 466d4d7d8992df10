from __future__ import annotations

from pathlib import Path

from settings import get_settings


def project_root() -> Path:
    # persistence/paths.py -> persistence -> project root
    return Path(__file__).resolve().parents[1]


def data_dir() -> Path:
    configured = get_settings().data_dir
    base = Path(configured).expanduser() if configured else project_root() / "data"
    return ensure_dir(base)


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def store_dir(data_dir: Path) -> Path:
    return ensure_dir(data_dir / "store")


def collection_path(data_dir: Path, collection: str) -> Path:
    safe = (collection.strip() or "default").replace("/", "_")
    return store_dir(data_dir) / f"{safe}.json"


def local_storage_path(data_dir: Path) -> Path:
    return data_dir / "local_storage.json"
