"""Expand user-supplied sources into a concrete list of RAML files."""

from __future__ import annotations

import glob
from pathlib import Path
from typing import Iterable

from ramlmock.exceptions import SpecLoadError

RAML_SUFFIX = ".raml"


def list_raml_files(directory: str) -> list[str]:
    """Return the ``*.raml`` files directly inside *directory*, sorted.

    Raises:
        SpecLoadError: If *directory* cannot be listed.
    """
    path = Path(directory)
    try:
        entries = list(path.iterdir())
    except OSError as exc:
        raise SpecLoadError(f"Cannot list RAML files in {directory}: {exc}", source=directory) from exc
    return sorted(str(p) for p in entries if p.suffix == RAML_SUFFIX and p.is_file())


def expand_sources(patterns: Iterable[str]) -> list[str]:
    """Expand glob patterns, keeping URLs and literal paths as given.

    Duplicates are dropped; the first occurrence keeps its position. A
    pattern that matches nothing contributes nothing.
    """
    expanded: list[str] = []
    for pattern in patterns:
        if pattern.startswith(("http://", "https://")) or not _is_pattern(pattern):
            expanded.append(pattern)
        else:
            expanded.extend(sorted(glob.glob(pattern, recursive=True)))
    return list(dict.fromkeys(expanded))


def _is_pattern(value: str) -> bool:
    return any(ch in value for ch in "*?[")
