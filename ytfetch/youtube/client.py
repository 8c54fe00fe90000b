"""
YouTube client for ytfetch.

Drives the yt-dlp command-line program for metadata lookup, media download
and subtitle download, reading its results from the process output.
"""

import logging
import os
import re
import shutil
import sys
from typing import List, Optional

from ..captions import convert_vtt_file
from ..exceptions import ParseError, YtFetchError
from ..models import DownloadOptions, VideoMetadata
from ..stream import STDOUT, YTDLP_FILENAME_PATTERNS, ProcessInvocation, StreamOutputParser
from ..stream.runner import EventCallback

logger = logging.getLogger(__name__)

_YOUTUBE_URL_PATTERN = re.compile(r'^(https?://)?(www\.|m\.)?(youtube\.com|youtu\.be)/.+$')
_YOUTUBE_ID_PATTERN = re.compile(
    r'^(?:https?://)?(?:www\.|m\.)?'
    r'(?:youtube\.com/(?:watch\?(?:.*&)?v=|embed/|shorts/|live/)|youtu\.be/)'
    r'([A-Za-z0-9_-]{6,})'
)

OUTPUT_TEMPLATE = '%(title)s [%(id)s].%(ext)s'
TRANSCRIPT_TEMPLATE = '%(title)s [%(id)s]'

# Order in which announced files identify the final media file
_MEDIA_CATEGORIES = ('merged', 'extracted_audio', 'already_downloaded', 'destination')


def is_youtube_url(url: str) -> bool:
    """
    Check if the provided URL points at youtube.com or youtu.be.

    Example:
        >>> is_youtube_url("https://www.youtube.com/watch?v=dQw4w9WgXcQ")
        True
        >>> is_youtube_url("https://example.com/video")
        False
    """
    return bool(_YOUTUBE_URL_PATTERN.match(url))


def extract_youtube_id(url: str) -> Optional[str]:
    """
    Extract YouTube video ID from a URL.

    Example:
        >>> extract_youtube_id("https://youtu.be/dQw4w9WgXcQ?t=10")
        'dQw4w9WgXcQ'
    """
    match = _YOUTUBE_ID_PATTERN.match(url)
    return match.group(1) if match else None


def default_ytdlp_command() -> List[str]:
    """
    Command used to run yt-dlp.

    Prefers a ``yt-dlp`` executable on PATH and otherwise runs the installed
    ``yt_dlp`` package with the current interpreter.
    """
    executable = shutil.which('yt-dlp')
    if executable:
        return [executable]
    return [sys.executable, '-m', 'yt_dlp']


def format_selector(quality: str, audio_only: bool = False) -> str:
    """
    yt-dlp ``--format`` value for a quality setting.

    Example:
        >>> format_selector("best")
        'best[ext=mp4]/best'
        >>> format_selector("best", audio_only=True)
        'bestaudio/best'
    """
    if audio_only:
        return 'bestaudio/best'
    if quality == 'best':
        return 'best[ext=mp4]/best'
    return quality


class YouTubeClient:
    """
    Client for fetching YouTube videos and subtitles with yt-dlp.

    Every method runs one yt-dlp process to completion; a client never runs
    two processes at the same time.
    """

    def __init__(
        self,
        ytdlp_path: Optional[str] = None,
        cookies_path: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        """
        Initialize YouTube client.

        Args:
            ytdlp_path: Path to the yt-dlp executable (default: found on PATH,
                falling back to ``python -m yt_dlp``)
            cookies_path: Optional path to cookies file for authentication
            timeout: Optional limit in seconds for each yt-dlp run
        """
        self.command = [ytdlp_path] if ytdlp_path else default_ytdlp_command()
        self.cookies_path = cookies_path
        self.timeout = timeout

    def _build_args(self, *args: str) -> List[str]:
        """
        Build a yt-dlp command line.

        User configuration files are ignored so that output stays in the
        format the parser expects.
        """
        command = list(self.command) + ['--ignore-config']
        if self.cookies_path:
            command += ['--cookies', self.cookies_path]
        command.extend(args)
        return command

    async def get_video_info(self, url: str) -> VideoMetadata:
        """
        Fetch metadata for a video without downloading it.

        Args:
            url: Video URL

        Returns:
            VideoMetadata for the video

        Raises:
            ProcessSpawnError: If yt-dlp cannot be started
            ProcessExitError: If yt-dlp fails (stderr is attached)
            ParseError: If yt-dlp does not print a JSON object
        """
        logger.info(f"Fetching video info: {url}")
        args = self._build_args(
            '--dump-json',
            '--no-download',
            '--no-playlist',
            '--no-write-sub',
            '--no-write-auto-sub',
            url,
        )
        parser = StreamOutputParser(progress_pattern=None, json_stream=STDOUT)
        result = await ProcessInvocation(args, parser, timeout=self.timeout).run()

        if not isinstance(result.payload, dict):
            raise ParseError(f"Unexpected video info from yt-dlp: {type(result.payload).__name__}")
        info = VideoMetadata.from_info_dict(result.payload)
        if not info.id:
            raise ParseError("Video info from yt-dlp has no id")

        logger.info(f"Found video {info.id}: {info.title}")
        return info

    async def download_video(
        self,
        url: str,
        options: DownloadOptions,
        on_event: Optional[EventCallback] = None
    ) -> Optional[str]:
        """
        Download a video (or only its audio) into ``options.output_dir``.

        Args:
            url: Video URL
            options: Download options (quality, audio_only, output_dir)
            on_event: Optional callback receiving parser events

        Returns:
            Path of the final media file as announced by yt-dlp, or None if
            yt-dlp did not announce one

        Raises:
            ProcessSpawnError: If yt-dlp cannot be started
            ProcessExitError: If the download fails
        """
        os.makedirs(options.output_dir, exist_ok=True)

        args = self._build_args(
            '--no-playlist',
            '--newline',
            '--format', format_selector(options.quality, options.audio_only),
            '--output', os.path.join(options.output_dir, OUTPUT_TEMPLATE),
            '--embed-metadata',
            '--write-info-json',
        )
        if options.audio_only:
            args += ['--extract-audio', '--audio-format', 'mp3']
        args.append(url)

        logger.info("Downloading audio..." if options.audio_only else "Downloading video...")
        parser = StreamOutputParser(filename_patterns=YTDLP_FILENAME_PATTERNS, progress_pattern=None)
        result = await ProcessInvocation(args, parser, on_event=on_event, timeout=self.timeout).run()

        for category in _MEDIA_CATEGORIES:
            paths = result.paths(category)
            if paths:
                logger.info(f"Downloaded file: {paths[-1]}")
                return paths[-1]

        logger.warning("Could not determine downloaded filename from yt-dlp output")
        return None

    async def download_transcripts(
        self,
        url: str,
        output_dir: str,
        convert_to_text: bool = True,
        deduplicate: bool = False
    ) -> List[str]:
        """
        Download all manual and automatic subtitle tracks as VTT.

        Args:
            url: Video URL
            output_dir: Directory to save subtitles
            convert_to_text: Also write a ``.txt`` next to every ``.vtt``
            deduplicate: Drop repeated lines when converting (see vtt_to_text)

        Returns:
            Paths announced by yt-dlp followed by the text files produced by
            conversion. A failed conversion is logged and leaves the VTT in place.

        Raises:
            ProcessSpawnError: If yt-dlp cannot be started
            ProcessExitError: If the subtitle download fails
        """
        os.makedirs(output_dir, exist_ok=True)

        args = self._build_args(
            '--no-playlist',
            '--write-sub',
            '--write-auto-sub',
            '--sub-format', 'vtt',
            '--skip-download',
            '--output', os.path.join(output_dir, TRANSCRIPT_TEMPLATE),
            url,
        )

        logger.info("Downloading transcripts...")
        parser = StreamOutputParser(
            filename_patterns={'subtitle': YTDLP_FILENAME_PATTERNS['subtitle']},
            progress_pattern=None,
        )
        result = await ProcessInvocation(args, parser, timeout=self.timeout).run()

        downloaded = [p for p in result.paths('subtitle') if p.endswith(('.vtt', '.txt'))]
        logger.info(f"yt-dlp wrote {len(downloaded)} subtitle file(s)")
        if not convert_to_text:
            return downloaded

        converted: List[str] = []
        for path in downloaded:
            if not path.endswith('.vtt'):
                continue
            try:
                converted.append(convert_vtt_file(path, deduplicate=deduplicate))
            except YtFetchError as e:
                logger.warning(f"Failed to convert {os.path.basename(path)} to text: {e}")

        return downloaded + [p for p in converted if p not in downloaded]


# Convenience functions
async def fetch_video_info(url: str, cookies_path: Optional[str] = None) -> VideoMetadata:
    """Fetch video metadata. Convenience function wrapping YouTubeClient."""
    return await YouTubeClient(cookies_path=cookies_path).get_video_info(url)


async def fetch_transcripts(url: str, output_dir: str, convert_to_text: bool = True) -> List[str]:
    """Download subtitles. Convenience function wrapping YouTubeClient."""
    return await YouTubeClient().download_transcripts(url, output_dir, convert_to_text)
