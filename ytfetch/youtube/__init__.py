"""
YouTube module for ytfetch.

Provides metadata lookup, media download and subtitle download through the
yt-dlp command-line program.
"""

from .client import (
    YouTubeClient,
    is_youtube_url,
    extract_youtube_id,
    default_ytdlp_command,
    format_selector,
    fetch_video_info,
    fetch_transcripts,
)

__all__ = [
    'YouTubeClient',
    'is_youtube_url',
    'extract_youtube_id',
    'default_ytdlp_command',
    'format_selector',
    'fetch_video_info',
    'fetch_transcripts',
]
