"""Template tree materialization and placeholder substitution.

``materialize`` copies a template directory byte-for-byte into a fresh
project directory.  ``substitute`` then rewrites a fixed list of files in
place, replacing ``{{tag}}`` placeholders with values from a view mapping.

A placeholder is ``{{`` + optional spaces + an identifier + optional spaces
+ ``}}``.  Only placeholders whose identifier is a key of the view are
replaced; every other byte, including unknown tags and other brace syntax,
is written back unchanged so a missing substitution shows up in the
generated project instead of disappearing.
"""

from __future__ import annotations

import asyncio
import re
import shutil
from pathlib import Path
from typing import Iterable, Mapping

from ..errors import IOFailure

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders ``{{tag}}`` placeholders in template files.

    Values are inserted verbatim; no HTML escaping is applied, the templated
    files are manifests and config files rather than markup fragments.
    """

    def __init__(self, pattern: re.Pattern[str] = PLACEHOLDER_PATTERN) -> None:
        self.pattern = pattern

    def render_string(self, template_string: str, view: Mapping[str, str]) -> str:
        """Render an inline template string against *view*."""

        def replace(match: re.Match[str]) -> str:
            name = match.group(1)
            if name in view:
                return str(view[name])
            return match.group(0)

        return self.pattern.sub(replace, template_string)

    def render_file(self, path: Path, view: Mapping[str, str]) -> None:
        """Rewrite *path* in place with its placeholders substituted."""
        try:
            raw = path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise IOFailure(f"Cannot read template file {path}: {exc}", step="substitute") from exc

        rendered = self.render_string(raw, view)
        if rendered == raw:
            return

        try:
            path.write_bytes(rendered.encode("utf-8"))
        except OSError as exc:
            raise IOFailure(f"Cannot write template file {path}: {exc}", step="substitute") from exc


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def materialize(source_dir: str | Path, dest_dir: str | Path) -> list[Path]:
    """Copy the template tree at *source_dir* into *dest_dir*.

    *dest_dir* must be absent or empty.  Files, sub-directories and
    permission bits are copied as-is.

    Returns:
        Sorted list of files written, relative to *dest_dir*.

    Raises:
        IOFailure: If the source is unreadable, the destination is not empty
            or cannot be created, or any copy fails.
    """
    source = Path(source_dir)
    dest = Path(dest_dir)

    if not source.is_dir():
        raise IOFailure(f"Template directory not found: {source}", step="materialize")
    if dest.is_dir() and any(dest.iterdir()):
        raise IOFailure(f"Destination {dest} is not empty", step="materialize")

    try:
        await asyncio.to_thread(shutil.copytree, source, dest, dirs_exist_ok=True)
    except (OSError, shutil.Error) as exc:
        raise IOFailure(f"Copying {source} to {dest} failed: {exc}", step="materialize") from exc

    return sorted(p.relative_to(dest) for p in dest.rglob("*") if p.is_file())


async def substitute(
    file_paths: Iterable[str | Path],
    view: Mapping[str, str],
    *,
    renderer: TemplateRenderer | None = None,
) -> list[Path]:
    """Substitute ``{{tag}}`` placeholders in each of *file_paths* in place.

    Returns:
        The rewritten paths, in the order given.

    Raises:
        IOFailure: If a listed file is missing, unreadable or unwritable.
    """
    renderer = renderer or TemplateRenderer()
    written: list[Path] = []
    for file_path in file_paths:
        path = Path(file_path)
        if not path.is_file():
            raise IOFailure(f"Templated file missing: {path}", step="substitute")
        await asyncio.to_thread(renderer.render_file, path, view)
        written.append(path)
    return written
