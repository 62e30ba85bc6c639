"""Discovery and decoding of the plain-text files of a corpus directory."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = (".txt",)


class CorpusError(OSError):
    """The corpus directory is missing or cannot be listed."""


def find_files(directory: str | Path, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> list[Path]:
    '''
    list the files under directory (recursively) whose suffix is one of extensions, in sorted order
    '''
    directory = Path(directory)
    if not directory.exists():
        raise CorpusError(f"Corpus directory not found: {directory}")
    if not directory.is_dir():
        raise CorpusError(f"Corpus path is not a directory: {directory}")

    suffixes = {ext.lower() if ext.startswith('.') else f".{ext.lower()}" for ext in extensions}
    try:
        return sorted(
            path for path in directory.rglob("*")
            if path.is_file() and path.suffix.lower() in suffixes
        )
    except OSError as exc:
        raise CorpusError(f"Cannot list corpus directory {directory}: {exc}") from exc


def load_texts(
    directory: str | Path,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    encoding: str = "utf-8",
) -> list[str]:
    """Read every text file of a corpus directory.

    Files that cannot be read or decoded are logged and skipped, and so are
    empty files.

    Raises
    ------
    CorpusError
        If the directory does not exist or cannot be listed.
    """
    extensions = tuple(extensions)
    texts = []
    for path in find_files(directory, extensions):
        try:
            content = path.read_text(encoding=encoding)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("skipping %s: %s", path, exc)
            continue

        if not content:
            logger.debug("skipping empty file %s", path)
            continue

        logger.info("loaded %s (%d characters)", path.name, len(content))
        texts.append(content)

    if not texts:
        logger.warning("no %s files with content found in %s", "/".join(extensions), directory)
    return texts
