"""
Shared utility functions for ytfetch.

Provides timestamp conversion and the small formatting helpers used when
reporting progress and results.
"""

from typing import Optional


def timestamp_to_seconds(timestamp: str) -> float:
    """
    Convert HH:MM:SS.mmm format to seconds.

    Fractions of any precision are accepted, so ffmpeg's centisecond
    ``HH:MM:SS.cc`` tokens convert as well.

    Args:
        timestamp: Timestamp string in HH:MM:SS.mmm format

    Returns:
        Time in seconds as float

    Example:
        >>> timestamp_to_seconds("00:01:30.500")
        90.5
        >>> timestamp_to_seconds("01:00:00.25")
        3600.25
    """
    h, m, s = timestamp.split(':')
    seconds = int(h) * 3600 + int(m) * 60 + float(s)
    return seconds


def format_duration(seconds: Optional[float]) -> str:
    """
    Format a duration in seconds as M:SS (or H:MM:SS past an hour).

    Example:
        >>> format_duration(125)
        '2:05'
        >>> format_duration(3725)
        '1:02:05'
    """
    if seconds is None:
        return "unknown"
    total = int(seconds)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_file_size(size: float) -> str:
    """
    Format a byte count with a binary unit.

    Example:
        >>> format_file_size(1536)
        '1.5 KB'
    """
    units = ['B', 'KB', 'MB', 'GB']
    unit_index = 0
    while size >= 1024 and unit_index < len(units) - 1:
        size /= 1024
        unit_index += 1
    return f"{size:.1f} {units[unit_index]}"
