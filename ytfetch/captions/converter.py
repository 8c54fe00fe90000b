"""
WebVTT to plain text conversion.

Flattens a subtitle track into one continuous paragraph: timing lines, cue
identifiers, header metadata and inline markup are dropped and the remaining
cue text is joined with single spaces.
"""

import logging
import os
import re
from typing import List, Optional

from ..exceptions import FileIOError

logger = logging.getLogger(__name__)

TIME_RANGE_SEPARATOR = '-->'

# Pre-compiled regex patterns
_TIMING_TAG_PATTERN = re.compile(r'<\d+:\d{2}:\d{2}\.\d{3}>')
_TAG_PATTERN = re.compile(r'<[^>]*>')
_ANGLE_BRACKET_PATTERN = re.compile(r'[<>]')
_WHITESPACE_PATTERN = re.compile(r'\s+')
_METADATA_PATTERN = re.compile(r'^(?:Kind|Language):')

# Converter states
SEEKING_CUE = 'seeking_cue'
IN_CUE_TEXT = 'in_cue_text'


def _is_header_line(line: str) -> bool:
    return (
        line.startswith('WEBVTT')
        or line == 'NOTE'
        or line.startswith('NOTE ')
        or bool(_METADATA_PATTERN.match(line))
    )


def clean_cue_text(line: str) -> str:
    """
    Remove inline markup from one line of cue text.

    Strips word-level timing tags such as ``<00:00:01.000>``, then every
    remaining ``<...>`` tag (``<c>``, ``<i>``, ``<v Speaker>``). Stray ``<`` or
    ``>`` characters are dropped and whitespace runs collapse to a single space.

    Example:
        >>> clean_cue_text("<00:00:01.000><c> Hello</c>   <i>world</i>")
        'Hello world'
    """
    text = _TIMING_TAG_PATTERN.sub('', line)
    text = _TAG_PATTERN.sub('', text)
    text = _ANGLE_BRACKET_PATTERN.sub('', text)
    return _WHITESPACE_PATTERN.sub(' ', text).strip()


def vtt_to_text(vtt_content: str, deduplicate: bool = False) -> str:
    """
    Convert WebVTT content to continuous plain text.

    Lines are processed by a two-state machine. A line containing ``-->``
    opens a cue and every non-empty line after it is cue text until an empty
    line closes the cue (a line of only whitespace counts as empty). Header
    lines (``WEBVTT``, ``NOTE``, ``Kind:``, ``Language:``) are skipped wherever
    they appear, and a line directly followed by a timing line is treated as
    a cue identifier and skipped. Malformed input never raises; unrecognised
    lines inside a cue are kept as text.

    Args:
        vtt_content: VTT document as string
        deduplicate: Drop a line identical to the previous kept line. YouTube
            auto-generated tracks repeat each line across rolling cues.

    Returns:
        The cleaned text joined with single spaces (empty if there are no cues)

    Example:
        >>> vtt_to_text("WEBVTT\\n\\n00:00:01.000 --> 00:00:02.000\\nHello <c>world</c>\\n\\n")
        'Hello world'
    """
    lines = [line.strip() for line in vtt_content.splitlines()]
    text_lines: List[str] = []
    state = SEEKING_CUE

    for i, line in enumerate(lines):
        if not line:
            state = SEEKING_CUE
            continue

        if _is_header_line(line):
            continue

        if TIME_RANGE_SEPARATOR in line:
            state = IN_CUE_TEXT
            continue

        # Cue identifier
        if i + 1 < len(lines) and TIME_RANGE_SEPARATOR in lines[i + 1]:
            continue

        if state == IN_CUE_TEXT:
            clean_text = clean_cue_text(line)
            if not clean_text:
                continue
            if deduplicate and text_lines and text_lines[-1] == clean_text:
                continue
            text_lines.append(clean_text)

    return ' '.join(text_lines).strip()


def text_path_for(vtt_path: str) -> str:
    """Sibling ``.txt`` path for a subtitle file."""
    base, ext = os.path.splitext(vtt_path)
    if ext.lower() == '.vtt':
        return f"{base}.txt"
    return f"{vtt_path}.txt"


def convert_vtt_file(
    vtt_path: str,
    output_path: Optional[str] = None,
    deduplicate: bool = False
) -> str:
    """
    Convert a VTT file to a plain-text file.

    Args:
        vtt_path: Path to the VTT file
        output_path: Destination (default: same name with a ``.txt`` extension)
        deduplicate: Passed through to :func:`vtt_to_text`

    Returns:
        Path of the written text file

    Raises:
        FileIOError: If the VTT file cannot be read or the text file cannot be written
    """
    output_path = output_path or text_path_for(vtt_path)

    try:
        with open(vtt_path, 'r', encoding='utf-8') as f:
            vtt_content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise FileIOError(f"Could not read {vtt_path}: {e}", path=vtt_path) from e

    text = vtt_to_text(vtt_content, deduplicate=deduplicate)

    try:
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(text)
    except OSError as e:
        raise FileIOError(f"Could not write {output_path}: {e}", path=output_path) from e

    logger.info(f"Converted {os.path.basename(vtt_path)} to {os.path.basename(output_path)} ({len(text)} chars)")
    return output_path
