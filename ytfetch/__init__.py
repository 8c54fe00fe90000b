"""
ytfetch - YouTube video and transcript downloader

A thin layer over the yt-dlp and ffmpeg command-line programs that reads
their output as it streams in and turns downloaded subtitles into text.

Features:
- Fetch video metadata, video or audio, and all subtitle tracks via yt-dlp
- Convert WebVTT subtitles to continuous plain text
- Incrementally parse process output (JSON documents, written files, progress)
- Re-encode downloads at a smaller size with ffmpeg

Example usage:
    >>> import asyncio
    >>> from ytfetch import YouTubeClient, vtt_to_text
    >>>
    >>> client = YouTubeClient()
    >>> info = asyncio.run(client.get_video_info("https://youtu.be/VIDEO_ID"))
    >>> files = asyncio.run(client.download_transcripts("https://youtu.be/VIDEO_ID", "transcripts"))
    >>>
    >>> vtt_to_text("WEBVTT\\n\\n00:00:01.000 --> 00:00:02.000\\nHello <c>world</c>\\n")
    'Hello world'
"""

import logging

__version__ = "1.0.0"
__author__ = "ytfetch Contributors"
__license__ = "MIT"

# Add NullHandler to prevent "No handler found" warnings
# Users should configure logging in their application if they want to see logs
logging.getLogger(__name__).addHandler(logging.NullHandler())

# Caption conversion
from .captions import clean_cue_text, vtt_to_text, convert_vtt_file

# Process output streaming
from .stream import (
    LineSplitter,
    StreamOutputParser,
    ProcessInvocation,
    ProcessState,
    run_process,
)

# Main classes and operations
from .youtube import YouTubeClient, is_youtube_url, extract_youtube_id
from .transcoder import compress_video, generate_compressed_filename, probe_media
from .transcripts import classify_transcript, organize_transcripts
from .commands import run_download, DownloadResult

# Data models
from .models import (
    VideoMetadata,
    TranscriptFiles,
    JsonPayload,
    MatchedFilename,
    ProgressTimestamp,
    ProcessResult,
    MediaInfo,
    DownloadOptions,
    CompressionOptions,
)

# Errors
from .exceptions import (
    YtFetchError,
    ProcessSpawnError,
    ProcessExitError,
    ProcessTimeoutError,
    ParseError,
    FileIOError,
    ValidationError,
)

__all__ = [
    # Version info
    "__version__",
    "__author__",
    "__license__",

    # Caption conversion
    "clean_cue_text",
    "vtt_to_text",
    "convert_vtt_file",

    # Process output streaming
    "LineSplitter",
    "StreamOutputParser",
    "ProcessInvocation",
    "ProcessState",
    "run_process",

    # Main classes and operations
    "YouTubeClient",
    "is_youtube_url",
    "extract_youtube_id",
    "compress_video",
    "generate_compressed_filename",
    "probe_media",
    "classify_transcript",
    "organize_transcripts",
    "run_download",
    "DownloadResult",

    # Models
    "VideoMetadata",
    "TranscriptFiles",
    "JsonPayload",
    "MatchedFilename",
    "ProgressTimestamp",
    "ProcessResult",
    "MediaInfo",
    "DownloadOptions",
    "CompressionOptions",

    # Errors
    "YtFetchError",
    "ProcessSpawnError",
    "ProcessExitError",
    "ProcessTimeoutError",
    "ParseError",
    "FileIOError",
    "ValidationError",
]
