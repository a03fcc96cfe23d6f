#!/usr/bin/env python3
"""
Mapping between wiki page titles and local wikitext files.

The sync script keeps one file per page; characters that are unsafe in
filenames are spelled out so the mapping stays reversible.
"""

from pathlib import Path
from typing import Iterator, Union

DEFAULT_EXTENSION = ".wiki"

_REPLACEMENTS = (
    ("/", "_SLASH_"),
    ("\\", "_BACKSLASH_"),
    (":", "_COLON_"),
    ("*", "_STAR_"),
    ("?", "_QUESTION_"),
    ('"', "_QUOTE_"),
    ("<", "_LT_"),
    (">", "_GT_"),
)


def title_to_filename(title: str, extension: str = DEFAULT_EXTENSION) -> str:
    """
    Convert a page title to a safe filename.

    "Transcription:Letter 1/2" -> "Transcription_COLON_Letter 1_SLASH_2.wiki"
    """
    safe = title
    for char, token in _REPLACEMENTS:
        safe = safe.replace(char, token)
    return safe + extension


def filename_to_title(filename: str, extension: str = DEFAULT_EXTENSION) -> str:
    """Convert a filename produced by title_to_filename() back to its title."""
    title = filename[: -len(extension)] if extension and filename.endswith(extension) else filename
    for char, token in _REPLACEMENTS:
        title = title.replace(token, char)
    return title


def iter_page_files(directory: Union[str, Path], extension: str = DEFAULT_EXTENSION) -> Iterator[tuple[str, Path]]:
    """Yield (title, path) for every page file in directory, sorted by filename."""
    for path in sorted(Path(directory).glob(f"*{extension}")):
        if path.is_file():
            yield filename_to_title(path.name, extension), path
