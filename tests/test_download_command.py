import asyncio
import io
import os

import pytest
from rich.console import Console

from ytfetch.commands import find_downloaded_video_file, run_download
from ytfetch.exceptions import ProcessExitError
from ytfetch.models import DownloadOptions, TranscriptFiles, VideoMetadata


class FakeClient:
    """Stands in for YouTubeClient and writes placeholder files."""

    def __init__(self, announce=True, fail_video=False, fail_transcripts=False):
        self.announce = announce
        self.fail_video = fail_video
        self.fail_transcripts = fail_transcripts
        self.calls = []

    async def get_video_info(self, url):
        self.calls.append("info")
        return VideoMetadata(id="abc123", title="Video [x]", duration=125,
                             uploader="Someone", upload_date="20240101")

    async def download_video(self, url, options):
        self.calls.append("video")
        if self.fail_video:
            raise ProcessExitError("yt-dlp", 1, "HTTP Error 403: Forbidden")
        ext = "mp3" if options.audio_only else "mp4"
        path = os.path.join(options.output_dir, f"Video [abc123].{ext}")
        with open(path, "wb") as f:
            f.write(b"media")
        return path if self.announce else None

    async def download_transcripts(self, url, output_dir, convert_to_text=True):
        self.calls.append("transcripts")
        if self.fail_transcripts:
            raise ProcessExitError("yt-dlp", 1, "no subtitles")
        names = ["Video [abc123].en.vtt", "Video [abc123].en-auto.vtt"]
        if convert_to_text:
            names += ["Video [abc123].en.txt", "Video [abc123].en-auto.txt"]
        return [os.path.join(output_dir, name) for name in names]


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=200)


def run(client, console, **options):
    options = DownloadOptions(**options)
    return asyncio.run(run_download("https://youtu.be/abc123", options, client=client, console=console))


def test_downloads_video_and_transcripts(tmp_path, console):
    client = FakeClient()
    result = run(client, console, output_dir=str(tmp_path / "out"), compression=False)

    assert client.calls == ["info", "video", "transcripts"]
    assert result.video.id == "abc123"
    assert result.output_dir == str(tmp_path / "out")
    assert result.media_file == str(tmp_path / "out" / "Video [abc123].mp4")
    assert len(result.transcript_files) == 4
    assert result.transcripts["en"] == TranscriptFiles(
        manual=str(tmp_path / "out" / "Video [abc123].en.txt"),
        auto=str(tmp_path / "out" / "Video [abc123].en-auto.txt"),
    )
    assert not result.compressed

    output = console.file.getvalue()
    assert "Video [x]" in output
    assert "Duration: 2:05" in output


def test_video_failure_is_fatal(tmp_path, console):
    client = FakeClient(fail_video=True)
    with pytest.raises(ProcessExitError):
        run(client, console, output_dir=str(tmp_path))
    assert client.calls == ["info", "video"]
    assert "Video download failed" in console.file.getvalue()


def test_transcript_failure_is_not_fatal(tmp_path, console):
    client = FakeClient(fail_transcripts=True)
    result = run(client, console, output_dir=str(tmp_path), compression=False)

    assert result.media_file is not None
    assert result.transcript_files == []
    assert "Transcript download failed" in console.file.getvalue()


def test_no_video_only_fetches_transcripts(tmp_path, console):
    client = FakeClient()
    result = run(client, console, output_dir=str(tmp_path), no_video=True)

    assert client.calls == ["info", "transcripts"]
    assert result.media_file is None
    assert not result.compressed


def test_unannounced_file_found_in_directory(tmp_path, console):
    result = run(FakeClient(announce=False), console, output_dir=str(tmp_path),
                 transcript=False, compression=False)
    assert result.media_file == str(tmp_path / "Video [abc123].mp4")


def test_compression_failure_keeps_download(tmp_path, console, monkeypatch):
    async def failing_probe(path, timeout=None):
        raise ProcessExitError("ffprobe", 1, "Invalid data found when processing input")

    monkeypatch.setattr("ytfetch.commands.download.probe_media", failing_probe)
    result = run(FakeClient(), console, output_dir=str(tmp_path), transcript=False)

    assert not result.compressed
    assert os.path.isfile(result.media_file)
    assert "Video compression failed" in console.file.getvalue()


def test_find_downloaded_video_file(tmp_path):
    (tmp_path / "Other [zzz].mp4").write_bytes(b"")
    (tmp_path / "Video [abc123].info.json").write_text("{}")
    (tmp_path / "Video [abc123].webm").write_bytes(b"")
    (tmp_path / "Video [abc123].mp3").write_bytes(b"")

    assert find_downloaded_video_file(str(tmp_path), "abc123") == str(tmp_path / "Video [abc123].webm")
    assert find_downloaded_video_file(str(tmp_path), "abc123", audio_only=True) == str(tmp_path / "Video [abc123].mp3")
    assert find_downloaded_video_file(str(tmp_path), "missing") is None
    assert find_downloaded_video_file(str(tmp_path / "nope"), "abc123") is None
