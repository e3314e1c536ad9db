from __future__ import annotations

from pathlib import Path

from . import config


ARTIFACT_NAMES = {
    "preview": "preview.png",
    "error": "error.log",
}


def meeting_dir(slug: str, base_dir: Path | None = None) -> Path:
    root = base_dir or config.OUT_DIR
    path = root / slug
    path.mkdir(parents=True, exist_ok=True)
    return path


def artifact_path(slug: str, artifact_type: str, base_dir: Path | None = None) -> Path:
    filename = ARTIFACT_NAMES[artifact_type]
    return meeting_dir(slug, base_dir=base_dir) / filename


def write_document(slug: str, filename: str, data: bytes, base_dir: Path | None = None) -> Path:
    if "/" in filename or "\\" in filename or ".." in filename:
        raise ValueError(f"Unsafe document filename: {filename}")
    path = meeting_dir(slug, base_dir=base_dir) / filename
    path.write_bytes(data)
    return path
