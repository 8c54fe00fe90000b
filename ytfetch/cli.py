"""Command-line interface for ytfetch."""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from . import __version__
from .commands import run_download
from .exceptions import YtFetchError
from .models import DownloadOptions
from .youtube import YouTubeClient, is_youtube_url

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='ytfetch',
        description="Download YouTube videos and transcripts, with optional compression.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument('url', help="YouTube video URL")
    parser.add_argument('-o', '--output', default='.', help="Output directory")
    parser.add_argument(
        '-q', '--quality',
        default='best',
        help="Video quality (best, worst, or a yt-dlp format selector)",
    )
    parser.add_argument(
        '-t', '--no-transcript',
        dest='transcript',
        action='store_false',
        help="Skip downloading transcripts",
    )
    parser.add_argument('-a', '--audio-only', action='store_true', help="Download audio only")
    parser.add_argument('--no-video', action='store_true', help="Skip the video/audio download")
    parser.add_argument(
        '--convert-subs',
        dest='convert_subs',
        action='store_true',
        default=True,
        help="Convert subtitles to plain text",
    )
    parser.add_argument(
        '--no-convert-subs',
        dest='convert_subs',
        action='store_false',
        help="Keep subtitles as VTT only",
    )
    parser.add_argument(
        '--no-compression',
        dest='compression',
        action='store_false',
        help="Skip video compression",
    )
    parser.add_argument(
        '--keep-original',
        action='store_true',
        help="Keep the downloaded file after compression",
    )
    parser.add_argument('--cookies', default=None, help="Cookies file passed to yt-dlp")
    parser.add_argument(
        '--timeout',
        type=float,
        default=None,
        help="Give up on any single yt-dlp/ffmpeg run after this many seconds",
    )
    parser.add_argument(
        '--log-level',
        default='WARNING',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help="Logging level",
    )
    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")
    return parser


def setup_logging(level: str, console: Console) -> None:
    """Send log records to the terminal through rich."""
    handler = RichHandler(console=console, show_time=False, show_path=False, markup=False)
    logging.basicConfig(level=getattr(logging, level, logging.WARNING), format='%(message)s',
                        handlers=[handler], force=True)
    logging.getLogger('asyncio').setLevel(logging.WARNING)


def options_from_args(args: argparse.Namespace) -> DownloadOptions:
    return DownloadOptions(
        output_dir=args.output,
        quality=args.quality,
        transcript=args.transcript,
        audio_only=args.audio_only,
        no_video=args.no_video,
        convert_subs=args.convert_subs,
        compression=args.compression,
        keep_original=args.keep_original,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Run the CLI and return the process exit status."""
    args = create_parser().parse_args(argv)
    console = Console()
    setup_logging(args.log_level, console)

    if not is_youtube_url(args.url):
        console.print("[red]Error:[/red] Invalid YouTube URL provided.")
        return 1
    if args.timeout is not None and args.timeout <= 0:
        console.print("[red]Error:[/red] --timeout must be positive.")
        return 1

    client = YouTubeClient(cookies_path=args.cookies, timeout=args.timeout)
    try:
        asyncio.run(run_download(args.url, options_from_args(args), client=client,
                             console=console, timeout=args.timeout))
    except YtFetchError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return 1
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted.[/yellow]")
        return 130
    return 0


if __name__ == '__main__':
    sys.exit(main())
