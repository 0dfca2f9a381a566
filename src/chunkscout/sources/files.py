"""Local file and directory sources."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Sequence

from pathspec import PathSpec

from .errors import SourceNotFoundError, SourceReadError

__all__ = ["FileSource", "iter_directory_sources"]


@dataclass(frozen=True, slots=True)
class FileSource:
    """A script file read lazily from disk."""

    path: Path
    encoding: str = "utf-8"

    @property
    def label(self) -> str:
        return str(self.path)

    def fetch(self) -> str:
        """Return the file text.

        Raises:
            SourceReadError: If the file cannot be read or decoded.
        """

        try:
            return self.path.read_text(encoding=self.encoding)
        except UnicodeDecodeError as exc:
            raise SourceReadError(
                f"{self.path}: not valid {self.encoding} text ({exc.reason})"
            ) from exc
        except OSError as exc:
            raise SourceReadError(f"{self.path}: {exc.strerror or exc}") from exc


def iter_directory_sources(
    root: Path,
    *,
    patterns: Sequence[str] = ("*.js",),
    follow_symlinks: bool = False,
    encoding: str = "utf-8",
) -> Iterator[FileSource]:
    """Yield a :class:`FileSource` for every matching file under ``root``.

    ``patterns`` use gitwildmatch syntax and are matched against paths
    relative to ``root``; the walk is recursive and sorted by name.

    Raises:
        SourceNotFoundError: If ``root`` does not exist or is not a directory.
    """

    if not root.exists():
        raise SourceNotFoundError(f"Directory not found: {root}")
    if not root.is_dir():
        raise SourceNotFoundError(f"Not a directory: {root}")

    spec = PathSpec.from_lines("gitwildmatch", patterns)
    base = root.resolve()
    for path in _walk(base, follow_symlinks=follow_symlinks, seen=set()):
        relative = path.relative_to(base).as_posix()
        if spec.match_file(relative):
            yield FileSource(path=path, encoding=encoding)


def _walk(
    directory: Path,
    *,
    follow_symlinks: bool,
    seen: set[Path],
) -> Iterator[Path]:
    # Followed symlinks may loop back into an ancestor.
    resolved = directory.resolve()
    if resolved in seen:
        return
    seen.add(resolved)

    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except PermissionError:
        return

    for entry in entries:
        if entry.is_symlink() and not follow_symlinks:
            continue
        try:
            is_dir = entry.is_dir()
        except OSError:
            continue
        if is_dir:
            yield from _walk(entry, follow_symlinks=follow_symlinks, seen=seen)
        elif entry.is_file():
            yield entry
