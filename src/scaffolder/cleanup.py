"""Removal of the default assets shipped by ``create-next-app``."""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class CleanupResult:
    """Outcome of clearing a directory.

    ``warning`` is set when the directory existed but could not be fully
    cleared; the caller reports it and carries on.
    """

    directory: Path
    removed: list[str] = field(default_factory=list)
    missing: bool = False
    warning: str | None = None


def clean_directory(directory: str | Path, keep: list[str] | tuple[str, ...] = (".gitkeep",)) -> CleanupResult:
    """Delete every entry in *directory* except the names in *keep*.

    A missing directory is not an error.  Any other ``OSError`` stops the
    cleanup and is returned as a warning instead of being raised.
    """
    target = Path(directory)
    result = CleanupResult(directory=target)

    try:
        entries = sorted(target.iterdir())
    except FileNotFoundError:
        result.missing = True
        return result
    except OSError as exc:
        result.warning = f"Could not clean {target.name} directory: {exc}"
        return result

    try:
        for entry in entries:
            if entry.name in keep:
                continue
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
            result.removed.append(entry.name)
    except OSError as exc:
        result.warning = f"Could not clean {target.name} directory: {exc}"

    return result
