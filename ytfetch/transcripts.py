"""
Transcript file organisation.

yt-dlp names subtitle files ``<title> [<id>].<lang>.<ext>``; auto-generated
tracks carry an ``-auto`` marker after the language code. This module groups
such files by language and provenance.
"""

import logging
import os
import re
from typing import Iterable, Optional, Tuple

from .models import TranscriptFiles, TranscriptFileSet

logger = logging.getLogger(__name__)

_TRANSCRIPT_SUFFIX_PATTERN = re.compile(
    r'\.(?P<lang>[A-Za-z]{2,3}(?:-(?!auto\.)[A-Za-z0-9]{2,4})?)(?P<auto>-auto)?\.(?P<ext>vtt|txt)$'
)


def classify_transcript(path: str) -> Optional[Tuple[str, bool, str]]:
    """
    Read language, provenance and format from a transcript filename.

    Args:
        path: Path or filename of a transcript

    Returns:
        Tuple of (language, is_auto, extension), or None if the name does not
        follow the convention

    Example:
        >>> classify_transcript("Video [abc].en-auto.vtt")
        ('en', True, 'vtt')
        >>> classify_transcript("Video [abc].pt-BR.txt")
        ('pt-BR', False, 'txt')
    """
    match = _TRANSCRIPT_SUFFIX_PATTERN.search(os.path.basename(path))
    if not match:
        return None
    return match.group('lang'), bool(match.group('auto')), match.group('ext')


def organize_transcripts(paths: Iterable[str]) -> TranscriptFileSet:
    """
    Group transcript files by language.

    ``<lang>`` and ``<lang>-auto`` files share one entry, as the manual and
    auto-generated track respectively. When both a ``.vtt`` and a ``.txt``
    exist for the same track the ``.txt`` is kept. Files that do not follow
    the naming convention are ignored.

    Example:
        >>> files = organize_transcripts(["X.en.vtt", "X.en-auto.vtt"])
        >>> files["en"]
        TranscriptFiles(manual='X.en.vtt', auto='X.en-auto.vtt')
    """
    organized: TranscriptFileSet = {}

    for path in paths:
        classified = classify_transcript(path)
        if classified is None:
            logger.debug(f"Not a transcript filename: {path}")
            continue
        lang, is_auto, ext = classified
        files = organized.setdefault(lang, TranscriptFiles())
        slot = 'auto' if is_auto else 'manual'
        current = getattr(files, slot)
        if current is None or ext == 'txt':
            setattr(files, slot, path)

    return organized
