import asyncio
import os

import pytest

from ytfetch.exceptions import ParseError, ProcessExitError
from ytfetch.models import DownloadOptions
from ytfetch.youtube import (
    YouTubeClient,
    extract_youtube_id,
    format_selector,
    is_youtube_url,
)

FAKE_YTDLP = """
    import json
    import sys

    args = sys.argv[1:]
    url = args[-1]

    def output_base(ext=None):
        template = args[args.index('--output') + 1]
        path = template.replace('%(title)s', 'Video').replace('%(id)s', 'abc123')
        return path.replace('%(ext)s', ext) if ext else path

    if 'missing' in url:
        sys.stderr.write('ERROR: [youtube] missing: Video unavailable\\n')
        sys.exit(1)

    if '--dump-json' in args:
        if 'garbage' in url:
            print('[1, 2, 3]')
        else:
            print(json.dumps({
                'id': 'abc123', 'title': 'Video', 'duration': 125,
                'uploader': 'Someone', 'upload_date': '20240101',
                'formats': [{'format_id': '18'}],
            }))
    elif '--skip-download' in args:
        for lang in ('en', 'en-auto'):
            path = output_base() + '.' + lang + '.vtt'
            with open(path, 'w', encoding='utf-8') as f:
                f.write('WEBVTT\\n\\n00:00:01.000 --> 00:00:02.000\\nHello <c>world</c>\\n')
            print('[info] Writing video subtitles to: ' + path)
    elif '--extract-audio' in args:
        print('[download] Destination: ' + output_base('webm'))
        path = output_base('mp3')
        open(path, 'wb').close()
        print('[ExtractAudio] Destination: ' + path)
    else:
        print('[download] Destination: ' + output_base('f137.mp4'))
        print('[download] 100% of 1.00MiB in 00:00:01')
        print('[download] Destination: ' + output_base('f140.m4a'))
        path = output_base('mp4')
        open(path, 'wb').close()
        print('[Merger] Merging formats into "' + path + '"')
"""


@pytest.fixture
def client(fake_program):
    client = YouTubeClient()
    client.command = fake_program("yt-dlp", FAKE_YTDLP)
    return client


def test_get_video_info(client):
    info = asyncio.run(client.get_video_info("https://www.youtube.com/watch?v=abc123"))
    assert info.id == "abc123"
    assert info.title == "Video"
    assert info.duration == 125
    assert info.uploader == "Someone"
    assert info.upload_date == "20240101"


def test_get_video_info_failure_carries_stderr(client):
    with pytest.raises(ProcessExitError) as excinfo:
        asyncio.run(client.get_video_info("https://youtu.be/missing"))
    assert "Video unavailable" in excinfo.value.stderr


def test_get_video_info_rejects_non_object(client):
    with pytest.raises(ParseError):
        asyncio.run(client.get_video_info("https://youtu.be/garbage"))


def test_download_transcripts_converts_to_text(client, tmp_path):
    files = asyncio.run(client.download_transcripts("https://youtu.be/abc123", str(tmp_path)))

    names = [os.path.basename(f) for f in files]
    assert names == [
        "Video [abc123].en.vtt",
        "Video [abc123].en-auto.vtt",
        "Video [abc123].en.txt",
        "Video [abc123].en-auto.txt",
    ]
    text = (tmp_path / "Video [abc123].en.txt").read_text(encoding="utf-8")
    assert text == "Hello world"


def test_download_transcripts_without_conversion(client, tmp_path):
    files = asyncio.run(
        client.download_transcripts("https://youtu.be/abc123", str(tmp_path), convert_to_text=False)
    )
    assert all(f.endswith(".vtt") for f in files)
    assert not list(tmp_path.glob("*.txt"))


def test_download_video_returns_merged_file(client, tmp_path):
    events = []
    options = DownloadOptions(output_dir=str(tmp_path))
    path = asyncio.run(client.download_video("https://youtu.be/abc123", options, on_event=events.append))

    assert path == str(tmp_path / "Video [abc123].mp4")
    assert os.path.isfile(path)
    assert [e.category for e in events] == ["destination", "destination", "merged"]


def test_download_audio_returns_extracted_file(client, tmp_path):
    options = DownloadOptions(output_dir=str(tmp_path), audio_only=True)
    path = asyncio.run(client.download_video("https://youtu.be/abc123", options))
    assert path == str(tmp_path / "Video [abc123].mp3")


def test_download_video_failure(client, tmp_path):
    with pytest.raises(ProcessExitError):
        asyncio.run(client.download_video("https://youtu.be/missing", DownloadOptions(output_dir=str(tmp_path))))


def test_build_args_adds_cookies():
    client = YouTubeClient(ytdlp_path="yt-dlp", cookies_path="cookies.txt")
    assert client._build_args("--dump-json", "URL") == [
        "yt-dlp", "--ignore-config", "--cookies", "cookies.txt", "--dump-json", "URL",
    ]


@pytest.mark.parametrize("url, expected", [
    ("https://www.youtube.com/watch?v=dQw4w9WgXcQ", True),
    ("https://youtu.be/dQw4w9WgXcQ", True),
    ("youtube.com/shorts/dQw4w9WgXcQ", True),
    ("https://m.youtube.com/watch?v=dQw4w9WgXcQ", True),
    ("https://example.com/watch?v=dQw4w9WgXcQ", False),
    ("not a url", False),
])
def test_is_youtube_url(url, expected):
    assert is_youtube_url(url) is expected


@pytest.mark.parametrize("url", [
    "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
    "https://www.youtube.com/watch?feature=share&v=dQw4w9WgXcQ",
    "https://youtu.be/dQw4w9WgXcQ?t=10",
    "https://www.youtube.com/embed/dQw4w9WgXcQ",
    "https://youtube.com/shorts/dQw4w9WgXcQ",
    "https://www.youtube.com/live/dQw4w9WgXcQ",
])
def test_extract_youtube_id(url):
    assert extract_youtube_id(url) == "dQw4w9WgXcQ"


def test_extract_youtube_id_unknown():
    assert extract_youtube_id("https://example.com/video") is None


def test_format_selector():
    assert format_selector("best") == "best[ext=mp4]/best"
    assert format_selector("worst") == "worst"
    assert format_selector("best", audio_only=True) == "bestaudio/best"
