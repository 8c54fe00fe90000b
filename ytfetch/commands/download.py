"""
The download command.

Runs the external programs one after another: metadata lookup, media
download, subtitle download and optional compression. Failing to fetch the
metadata or the media aborts the run; subtitle and compression failures are
reported as warnings and leave the files obtained so far in place.
"""

import logging
import os
from dataclasses import dataclass, field, replace
from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from ..exceptions import FileIOError, YtFetchError
from ..models import CompressionOptions, DownloadOptions, TranscriptFileSet, VideoMetadata
from ..transcoder import compress_video, probe_media
from ..transcripts import organize_transcripts
from ..utils import format_duration, format_file_size
from ..youtube import YouTubeClient

logger = logging.getLogger(__name__)

VIDEO_EXTENSIONS = ('.mp4', '.webm', '.mkv')
AUDIO_EXTENSIONS = ('.m4a', '.webm', '.mp3')


@dataclass
class DownloadResult:
    """What a download run produced."""
    video: VideoMetadata
    output_dir: str
    media_file: Optional[str] = None
    transcript_files: List[str] = field(default_factory=list)
    transcripts: TranscriptFileSet = field(default_factory=dict)
    compressed: bool = False


def find_downloaded_video_file(output_dir: str, video_id: str, audio_only: bool = False) -> Optional[str]:
    """
    Look for a media file containing ``video_id`` in ``output_dir``.

    Used when yt-dlp did not announce the file it wrote.
    """
    extensions = AUDIO_EXTENSIONS if audio_only else VIDEO_EXTENSIONS
    try:
        names = sorted(os.listdir(output_dir))
    except OSError as e:
        logger.warning(f"Could not list {output_dir}: {e}")
        return None

    for name in names:
        if video_id in name and name.endswith(extensions):
            return os.path.join(output_dir, name)
    return None


async def run_download(
    url: str,
    options: DownloadOptions,
    client: Optional[YouTubeClient] = None,
    console: Optional[Console] = None,
    timeout: Optional[float] = None
) -> DownloadResult:
    """
    Download a video and its transcripts.

    Args:
        url: Video URL
        options: What to download and where
        client: YouTube client (default: a new one)
        console: Console for progress output (default: a new one)
        timeout: Optional limit in seconds for each ffmpeg/ffprobe run

    Returns:
        DownloadResult describing the produced files

    Raises:
        YtFetchError: If the metadata lookup or the media download fails
    """
    client = client or YouTubeClient()
    console = console or Console()

    with console.status("Getting video information...") as status:
        info = await client.get_video_info(url)
        console.print(f"[green]✓[/green] Found video: [cyan]{escape(str(info.title))}[/cyan] by [yellow]{escape(str(info.uploader))}[/yellow]")
        console.print(f"[dim]Duration: {format_duration(info.duration)}[/dim]")
        console.print(f"[dim]Upload date: {info.upload_date}[/dim]")

        output_dir = os.path.abspath(options.output_dir)
        try:
            os.makedirs(output_dir, exist_ok=True)
        except OSError as e:
            raise FileIOError(f"Could not create output directory {output_dir}: {e}", path=output_dir) from e
        result = DownloadResult(video=info, output_dir=output_dir)
        media_options = replace(options, output_dir=output_dir)

        if not options.no_video:
            what = 'Audio' if options.audio_only else 'Video'
            status.update(f"Downloading {what.lower()}...")
            try:
                media_file = await client.download_video(url, media_options)
            except YtFetchError:
                console.print(f"[red]✗ {what} download failed[/red]")
                raise
            if not media_file or not os.path.isfile(media_file):
                media_file = find_downloaded_video_file(output_dir, info.id, options.audio_only)
            result.media_file = media_file

            if media_file:
                console.print(f"[green]✓[/green] {what} downloaded: [green]{escape(os.path.basename(media_file))}[/green]")
            else:
                console.print("[yellow]![/yellow] Download completed but file path could not be determined")

        if options.transcript:
            status.update("Downloading transcripts...")
            await _download_transcripts(client, url, output_dir, options, result, console)

        if (not options.no_video and not options.audio_only and options.compression
                and result.media_file):
            await _compress(result, options, console, status, timeout)

    console.print("\n[green]✓ Download completed successfully![/green]")
    console.print(f"[blue]Files saved to:[/blue] [cyan]{escape(output_dir)}[/cyan]")
    if result.media_file and os.path.isfile(result.media_file):
        size = os.path.getsize(result.media_file)
        console.print(f"[dim]Media: {escape(os.path.basename(result.media_file))} ({format_file_size(size)})[/dim]")
    if result.transcript_files:
        console.print(f"[dim]Transcripts: {len(result.transcript_files)} files[/dim]")

    return result


async def _download_transcripts(client, url, output_dir, options, result, console):
    try:
        files = await client.download_transcripts(url, output_dir, options.convert_subs)
    except YtFetchError as e:
        logger.warning(f"Transcript download failed: {e}")
        console.print(f"[yellow]![/yellow] Transcript download failed: {escape(str(e))}")
        return

    if not files:
        console.print("[yellow]![/yellow] No transcripts available for this video")
        return

    result.transcript_files = files
    result.transcripts = organize_transcripts(files)
    console.print(f"[green]✓[/green] Downloaded {len(files)} transcript(s)")
    console.print("[blue]Available transcripts:[/blue]")
    for lang, tracks in sorted(result.transcripts.items()):
        manual = ' (manual)' if tracks.manual else ''
        auto = ' (auto)' if tracks.auto else ''
        console.print(f"  [cyan]{escape(lang)}[/cyan]{manual}{auto}")


async def _compress(result, options, console, status, timeout):
    status.update("Compressing video...")
    media_file = result.media_file
    try:
        original = await probe_media(media_file, timeout=timeout)

        def show_progress(seconds):
            if original.duration:
                percent = min(100.0, seconds / original.duration * 100)
                status.update(f"Compressing video... {percent:.0f}%")
            else:
                status.update(f"Compressing video... {seconds:.0f}s processed")

        compressed_path = await compress_video(
            CompressionOptions(input_file=media_file, keep_original=options.keep_original),
            on_progress=show_progress,
            timeout=timeout,
        )
        compressed_size = os.path.getsize(compressed_path)
    except (YtFetchError, OSError) as e:
        logger.warning(f"Video compression failed: {e}")
        console.print(f"[red]✗ Video compression failed:[/red] {escape(str(e))}")
        return

    saved = original.size - compressed_size
    percent_saved = saved / original.size * 100 if original.size else 0.0
    console.print(f"[green]✓[/green] Video compressed: [green]{escape(os.path.basename(compressed_path))}[/green]")
    console.print(f"[dim]Size reduction: {format_file_size(saved)} ({percent_saved:.1f}%)[/dim]")
    result.media_file = compressed_path
    result.compressed = True
