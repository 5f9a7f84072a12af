"""Uploaded file storage."""
import random
import re
import time
from pathlib import Path, PureWindowsPath

from ..config import settings

_WHITESPACE = re.compile(r"\s+")


def stored_name_for(original_name: str) -> str:
    """Unique on-disk name: epoch millis, a random suffix, the sanitized original.

    Only the last path component of the client name is kept, split on either
    separator, so the result always lands directly under the uploads root.
    """
    base = PureWindowsPath(original_name).name
    unique = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    return f"{unique}-{_WHITESPACE.sub('_', base)}"


def write_blob(name: str, data: bytes, root: Path | None = None) -> Path:
    target_root = root or settings.uploads_dir
    target_root.mkdir(parents=True, exist_ok=True)
    target = target_root / name
    target.write_bytes(data)
    return target
