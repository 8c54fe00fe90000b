import pytest

from ytfetch import cli
from ytfetch.exceptions import ProcessExitError
from ytfetch.models import DownloadOptions


@pytest.fixture
def calls(monkeypatch):
    """Replace the download command and logging setup, recording invocations."""
    recorded = []

    async def fake_run_download(url, options, client=None, console=None, timeout=None):
        recorded.append((url, options, client, timeout))

    monkeypatch.setattr(cli, "run_download", fake_run_download)
    monkeypatch.setattr(cli, "setup_logging", lambda level, console: None)
    return recorded


def test_parser_defaults():
    args = cli.create_parser().parse_args(["https://youtu.be/abc123"])
    assert cli.options_from_args(args) == DownloadOptions()
    assert args.cookies is None
    assert args.timeout is None
    assert args.log_level == "WARNING"


def test_parser_flags():
    args = cli.create_parser().parse_args([
        "https://youtu.be/abc123", "-o", "out", "-q", "worst", "-t", "-a",
        "--no-convert-subs", "--no-compression", "--keep-original",
        "--cookies", "cookies.txt", "--timeout", "30",
    ])
    assert cli.options_from_args(args) == DownloadOptions(
        output_dir="out",
        quality="worst",
        transcript=False,
        audio_only=True,
        no_video=False,
        convert_subs=False,
        compression=False,
        keep_original=True,
    )
    assert args.cookies == "cookies.txt"
    assert args.timeout == 30.0


def test_main_runs_download(calls):
    assert cli.main(["https://www.youtube.com/watch?v=abc123", "--no-video", "--timeout", "60"]) == 0

    [(url, options, client, timeout)] = calls
    assert url == "https://www.youtube.com/watch?v=abc123"
    assert options.no_video
    assert timeout == 60.0
    assert client.timeout == 60.0


def test_main_rejects_invalid_url(calls, capsys):
    assert cli.main(["https://example.com/video"]) == 1
    assert calls == []
    assert "Invalid YouTube URL" in capsys.readouterr().out


def test_main_rejects_non_positive_timeout(calls):
    assert cli.main(["https://youtu.be/abc123", "--timeout", "0"]) == 1
    assert calls == []


def test_main_reports_errors(monkeypatch, capsys):
    async def failing_run_download(url, options, client=None, console=None, timeout=None):
        raise ProcessExitError("yt-dlp", 1, "ERROR: Video unavailable")

    monkeypatch.setattr(cli, "run_download", failing_run_download)
    monkeypatch.setattr(cli, "setup_logging", lambda level, console: None)

    assert cli.main(["https://youtu.be/abc123"]) == 1
    assert "Video unavailable" in capsys.readouterr().out


def test_version(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--version"])
    assert excinfo.value.code == 0
    assert "ytfetch" in capsys.readouterr().out
