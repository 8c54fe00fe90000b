"""
Re-encoding and probing of downloaded media with ffmpeg/ffprobe.

Command lines are built with ffmpeg-python and run through the process
runner, so progress can be reported while ffmpeg works.
"""

import logging
import os
from typing import Callable, List, Optional, Sequence, Union

import ffmpeg

from .exceptions import ParseError, ValidationError
from .models import CompressionOptions, MediaInfo, ProgressTimestamp
from .stream import PROGRESS_PATTERN, STDOUT, ProcessInvocation, StreamOutputParser

logger = logging.getLogger(__name__)

# libx264 at CRF 18 is visually lossless; "slow" trades time for size
VIDEO_CODEC = 'libx264'
CRF = 18
PRESET = 'slow'
AUDIO_CODEC = 'aac'
AUDIO_BITRATE = '128k'


def generate_compressed_filename(input_file: str) -> str:
    """
    Output path for a compressed copy of ``input_file``.

    Example:
        >>> generate_compressed_filename("/tmp/example.webm")
        '/tmp/example_compressed.mp4'
    """
    directory, filename = os.path.split(input_file)
    stem = os.path.splitext(filename)[0]
    return os.path.join(directory, f"{stem}_compressed.mp4")


def build_compress_args(
    input_file: str,
    output_file: str,
    ffmpeg_cmd: Union[str, Sequence[str]] = 'ffmpeg'
) -> List[str]:
    """ffmpeg command line re-encoding ``input_file`` to H.264/AAC MP4."""
    stream = ffmpeg.input(input_file).output(
        output_file,
        vcodec=VIDEO_CODEC,
        crf=CRF,
        preset=PRESET,
        acodec=AUDIO_CODEC,
        audio_bitrate=AUDIO_BITRATE,
        movflags='+faststart',
    )
    cmd = ffmpeg_cmd if isinstance(ffmpeg_cmd, str) else list(ffmpeg_cmd)
    return stream.overwrite_output().compile(cmd=cmd)


async def compress_video(
    options: CompressionOptions,
    on_progress: Optional[Callable[[float], None]] = None,
    ffmpeg_cmd: Union[str, Sequence[str]] = 'ffmpeg',
    timeout: Optional[float] = None
) -> str:
    """
    Re-encode a video at a smaller size.

    Args:
        options: Input/output paths and whether to keep the original
        on_progress: Called with the number of seconds of media processed so far
        ffmpeg_cmd: ffmpeg executable (or command prefix)
        timeout: Optional limit in seconds for the ffmpeg run

    Returns:
        Path of the compressed file

    Raises:
        ValidationError: If the input file does not exist or equals the output
        ProcessSpawnError: If ffmpeg cannot be started
        ProcessExitError: If ffmpeg fails (stderr is attached)
        ParseError: If ffmpeg succeeded but the output file is missing or empty
    """
    input_file = options.input_file
    output_file = options.output_file or generate_compressed_filename(input_file)

    if not os.path.isfile(input_file):
        raise ValidationError(f"Input file not found: {input_file}")
    if os.path.abspath(input_file) == os.path.abspath(output_file):
        raise ValidationError(f"Output file would overwrite the input: {output_file}")

    logger.info(f"Compressing video: {os.path.basename(input_file)} -> {os.path.basename(output_file)}")

    def handle_event(event):
        if on_progress is not None and isinstance(event, ProgressTimestamp):
            on_progress(event.seconds)

    # ffmpeg writes progress to stderr
    parser = StreamOutputParser(progress_pattern=PROGRESS_PATTERN)
    await ProcessInvocation(
        build_compress_args(input_file, output_file, ffmpeg_cmd),
        parser,
        on_event=handle_event,
        timeout=timeout,
    ).run()

    try:
        size = os.path.getsize(output_file)
    except OSError as e:
        raise ParseError(f"Compressed file was not created: {output_file}") from e
    if size == 0:
        raise ParseError(f"Compressed file is empty: {output_file}")

    logger.info(f"Compression complete: {os.path.basename(output_file)} ({size} bytes)")

    if not options.keep_original:
        os.remove(input_file)
        logger.info(f"Removed original file: {os.path.basename(input_file)}")

    return output_file


async def probe_media(
    path: str,
    ffprobe_cmd: Union[str, Sequence[str]] = 'ffprobe',
    timeout: Optional[float] = None
) -> MediaInfo:
    """
    Read duration, dimensions and size of a local video file.

    Raises:
        ValidationError: If the file does not exist
        ProcessExitError: If ffprobe fails
        ParseError: If ffprobe output is not JSON or has no video stream
    """
    try:
        size = os.path.getsize(path)
    except OSError as e:
        raise ValidationError(f"Media file not found: {path}") from e

    command = [ffprobe_cmd] if isinstance(ffprobe_cmd, str) else list(ffprobe_cmd)
    args = command + [
        '-v', 'quiet',
        '-print_format', 'json',
        '-show_format',
        '-show_streams',
        path,
    ]
    parser = StreamOutputParser(progress_pattern=None, json_stream=STDOUT)
    result = await ProcessInvocation(args, parser, timeout=timeout).run()

    info = result.payload if isinstance(result.payload, dict) else {}
    video_stream = next(
        (s for s in info.get('streams', []) if s.get('codec_type') == 'video'),
        None,
    )
    if video_stream is None:
        raise ParseError(f"No video stream found in {path}")

    try:
        duration = float(info.get('format', {}).get('duration') or 0)
    except (TypeError, ValueError):
        duration = 0.0

    return MediaInfo(
        duration=duration,
        width=video_stream.get('width') or 0,
        height=video_stream.get('height') or 0,
        size=size,
    )
