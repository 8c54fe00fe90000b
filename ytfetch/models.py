"""
Data models for ytfetch.

Defines the records exchanged between the process layer, the YouTube client,
the transcoder helpers and the download command.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass
class VideoMetadata:
    """Basic facts about a video as reported by yt-dlp."""
    id: str
    title: str
    duration: Optional[float]
    uploader: Optional[str]
    upload_date: Optional[str]  # YYYYMMDD

    @classmethod
    def from_info_dict(cls, info: Dict[str, Any]) -> "VideoMetadata":
        return cls(
            id=info.get('id'),
            title=info.get('title'),
            duration=info.get('duration'),
            uploader=info.get('uploader'),
            upload_date=info.get('upload_date'),
        )


@dataclass
class TranscriptFiles:
    """Transcript files for one language, split by provenance."""
    manual: Optional[str] = None
    auto: Optional[str] = None


# language code -> files
TranscriptFileSet = Dict[str, TranscriptFiles]


@dataclass(frozen=True)
class JsonPayload:
    """A complete JSON document parsed from a process stream."""
    stream: str
    document: Any


@dataclass(frozen=True)
class MatchedFilename:
    """A path announced on a line of process output."""
    stream: str
    category: str
    path: str


@dataclass(frozen=True)
class ProgressTimestamp:
    """An elapsed-time token found in process output, in seconds."""
    stream: str
    seconds: float


ProcessEvent = Union[JsonPayload, MatchedFilename, ProgressTimestamp]


@dataclass
class ProcessResult:
    """Outcome of a process invocation that exited with status 0."""
    args: List[str]
    returncode: int
    stdout: str
    stderr: str
    payload: Any = None
    matched_files: List[MatchedFilename] = field(default_factory=list)

    def paths(self, *categories: str) -> List[str]:
        """Paths matched in the given categories, in output order."""
        return [m.path for m in self.matched_files if not categories or m.category in categories]


@dataclass
class MediaInfo:
    """Properties of a local media file as reported by ffprobe."""
    duration: float
    width: int
    height: int
    size: int


@dataclass
class DownloadOptions:
    """Configuration for a download run."""
    output_dir: str = '.'
    quality: str = 'best'
    transcript: bool = True
    audio_only: bool = False
    no_video: bool = False
    convert_subs: bool = True
    compression: bool = True
    keep_original: bool = False


@dataclass
class CompressionOptions:
    """Configuration for re-encoding a downloaded video."""
    input_file: str
    output_file: Optional[str] = None
    keep_original: bool = False
