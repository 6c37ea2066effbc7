"""IO utilities shared across the codebase."""

from pathlib import Path
from typing import Iterable


def file_present(path: Path) -> bool:
    """Return True if path exists and is a regular file. Catches OSError."""
    try:
        return path.is_file()
    except OSError:
        return False


def write_chunks_atomic(dest: Path, chunks: Iterable[bytes]) -> int:
    """
    Stream chunks into dest.part, then rename over dest. Return bytes written.

    If iterating chunks raises, the partial file is removed and dest is left untouched.
    """
    dest = Path(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)
    tmp = dest.with_name(dest.name + ".part")
    written = 0
    try:
        with open(tmp, "wb") as f:
            for chunk in chunks:
                if chunk:
                    f.write(chunk)
                    written += len(chunk)
        tmp.replace(dest)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    return written
