import pytest

from ytfetch.utils import format_duration, format_file_size, timestamp_to_seconds


@pytest.mark.parametrize("timestamp, seconds", [
    ("00:00:00.000", 0.0),
    ("00:01:30.500", 90.5),
    ("01:00:00.25", 3600.25),
    ("100:00:01.00", 360001.0),
])
def test_timestamp_to_seconds(timestamp, seconds):
    assert timestamp_to_seconds(timestamp) == seconds


def test_format_duration():
    assert format_duration(5) == "0:05"
    assert format_duration(125) == "2:05"
    assert format_duration(3725.9) == "1:02:05"
    assert format_duration(None) == "unknown"


def test_format_file_size():
    assert format_file_size(512) == "512.0 B"
    assert format_file_size(1536) == "1.5 KB"
    assert format_file_size(5 * 1024 ** 3) == "5.0 GB"
