"""Commands run by the ytfetch CLI."""

from .download import DownloadResult, run_download, find_downloaded_video_file

__all__ = [
    "DownloadResult",
    "run_download",
    "find_downloaded_video_file",
]
