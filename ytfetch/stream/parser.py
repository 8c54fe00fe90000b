"""
Incremental parsing of child process output.

A running process writes to stdout and stderr in chunks whose boundaries have
nothing to do with lines or documents. ``StreamOutputParser`` keeps one buffer
per stream and turns the chunks into events as soon as a complete unit is
available: a JSON document, a line announcing a written file, or a line
carrying an elapsed-time token.
"""

import codecs
import json
import logging
import re
from typing import Any, Dict, List, Optional, Pattern, Tuple, Union

from ..exceptions import ParseError
from ..models import JsonPayload, MatchedFilename, ProcessEvent, ProgressTimestamp
from ..utils import timestamp_to_seconds

logger = logging.getLogger(__name__)

STDOUT = 'stdout'
STDERR = 'stderr'

_LINE_BREAK = re.compile(r'\r\n|\r|\n')

# ffmpeg reports "time=00:01:02.35" on stderr (centiseconds)
PROGRESS_PATTERN = re.compile(r'time=(\d{2,}:\d{2}:\d{2}\.\d{2,3})')

# Lines yt-dlp prints when it writes a file
YTDLP_FILENAME_PATTERNS: Dict[str, Pattern] = {
    'subtitle': re.compile(r'^\[info\] Writing video subtitles to: (?P<path>.+)$'),
    'info_json': re.compile(r'^\[info\] Writing video metadata as JSON to: (?P<path>.+)$'),
    'destination': re.compile(r'^\[download\] Destination: (?P<path>.+)$'),
    'already_downloaded': re.compile(r'^\[download\] (?P<path>.+?) has already been downloaded'),
    'merged': re.compile(r'^\[Merger\] Merging formats into "(?P<path>.+)"$'),
    'extracted_audio': re.compile(r'^\[ExtractAudio\] Destination: (?P<path>.+)$'),
}

_MISSING = object()


class LineSplitter:
    """
    Split a chunked text stream into lines.

    Only the unterminated tail is kept between calls, so every completed line
    is returned exactly once. ``\\n``, ``\\r\\n`` and bare ``\\r`` (used by
    progress bars) all terminate a line; a trailing ``\\r`` is held back until
    the next chunk shows whether a ``\\n`` follows it.

    Example:
        >>> splitter = LineSplitter()
        >>> splitter.feed("first li")
        []
        >>> splitter.feed("ne\\nsecond")
        ['first line']
        >>> splitter.flush()
        ['second']
    """

    def __init__(self):
        self._tail = ''

    def feed(self, text: str) -> List[str]:
        data = self._tail + text
        lines = []
        start = 0
        for match in _LINE_BREAK.finditer(data):
            if match.group() == '\r' and match.end() == len(data):
                break
            lines.append(data[start:match.start()])
            start = match.end()
        self._tail = data[start:]
        return lines

    def flush(self) -> List[str]:
        tail = self._tail.rstrip('\r')
        self._tail = ''
        return [tail] if tail else []


class _StreamBuffer:
    """Decoder, accumulated text and line splitter for one output stream."""

    def __init__(self):
        self.decoder = codecs.getincrementaldecoder('utf-8')(errors='replace')
        self.splitter = LineSplitter()
        self.text = ''

    def decode(self, chunk: Union[bytes, str], final: bool = False) -> str:
        if isinstance(chunk, str):
            return chunk
        return self.decoder.decode(chunk, final)


class StreamOutputParser:
    """
    Extract structured events from the output of one process invocation.

    An instance owns all state for a single invocation and must not be
    reused. Feed it chunks with :meth:`feed` as they arrive and call
    :meth:`close` once the process has exited.

    Args:
        filename_patterns: Mapping of category name to a regex with a ``path``
            group (or a first group). Every completed line is matched against
            each pattern.
        progress_pattern: Regex whose first group is an ``HH:MM:SS.mmm``
            token, searched in every completed line. ``None`` disables
            progress events.
        json_stream: Stream expected to carry exactly one JSON document
            (``"stdout"`` or ``"stderr"``), or ``None`` when no JSON is expected.

    Example:
        >>> parser = StreamOutputParser(json_stream=STDOUT)
        >>> parser.feed(STDOUT, b'{"id": ')
        []
        >>> parser.feed(STDOUT, b'"abc"}')
        [JsonPayload(stream='stdout', document={'id': 'abc'})]
    """

    def __init__(
        self,
        filename_patterns: Optional[Dict[str, Union[str, Pattern]]] = None,
        progress_pattern: Optional[Union[str, Pattern]] = PROGRESS_PATTERN,
        json_stream: Optional[str] = None
    ):
        self.filename_patterns: List[Tuple[str, Pattern]] = [
            (category, re.compile(pattern)) for category, pattern in (filename_patterns or {}).items()
        ]
        self.progress_pattern = re.compile(progress_pattern) if progress_pattern is not None else None
        if json_stream not in (None, STDOUT, STDERR):
            raise ValueError(f"Unknown stream: {json_stream}")
        self.json_stream = json_stream

        self._streams = {STDOUT: _StreamBuffer(), STDERR: _StreamBuffer()}
        self._payload: Any = _MISSING
        self._json_emitted = False
        self._closed = False
        self.matches: List[MatchedFilename] = []
        self.last_progress: Optional[float] = None

    def _buffer(self, stream: str) -> _StreamBuffer:
        try:
            return self._streams[stream]
        except KeyError:
            raise ValueError(f"Unknown stream: {stream}") from None

    def text(self, stream: str) -> str:
        """Everything decoded from ``stream`` so far."""
        return self._buffer(stream).text

    @property
    def payload(self) -> Any:
        """The parsed JSON document, or ``None`` if none has been parsed."""
        return None if self._payload is _MISSING else self._payload

    def matched_files(self, category: Optional[str] = None) -> List[str]:
        """Matched paths in output order, optionally restricted to one category."""
        return [m.path for m in self.matches if category is None or m.category == category]

    def feed(self, stream: str, chunk: Union[bytes, str]) -> List[ProcessEvent]:
        """
        Consume one chunk of output.

        Args:
            stream: ``"stdout"`` or ``"stderr"``
            chunk: Raw bytes (decoded incrementally as UTF-8) or text

        Returns:
            Events produced by this chunk, in output order
        """
        if self._closed:
            raise RuntimeError("Parser is closed")
        buffer = self._buffer(stream)
        return self._consume(stream, buffer, buffer.decode(chunk))

    def close(self, check_json: bool = True) -> List[ProcessEvent]:
        """
        Flush unterminated output after the process has exited.

        Args:
            check_json: Require the JSON stream to hold one complete document.
                Pass ``False`` when the process failed and its output is only
                kept as diagnostics.

        Returns:
            Events produced by the flushed output

        Raises:
            ParseError: If a JSON document was expected and the buffer does not parse
        """
        if self._closed:
            return []
        self._closed = True

        events: List[ProcessEvent] = []
        for stream, buffer in self._streams.items():
            rest = buffer.decoder.decode(b'', True)
            if rest:
                events.extend(self._consume(stream, buffer, rest))
            for line in buffer.splitter.flush():
                events.extend(self._scan_line(stream, line))

        if self.json_stream and check_json and self._payload is _MISSING:
            text = self._streams[self.json_stream].text
            try:
                self._payload = json.loads(text)
            except ValueError as e:
                snippet = text.strip()[:200]
                raise ParseError(f"Could not parse JSON output: {e} (output: {snippet!r})") from e
            events.append(JsonPayload(self.json_stream, self._payload))
            self._json_emitted = True

        return events

    def _consume(self, stream: str, buffer: _StreamBuffer, text: str) -> List[ProcessEvent]:
        if not text:
            return []
        buffer.text += text

        events: List[ProcessEvent] = []
        for line in buffer.splitter.feed(text):
            events.extend(self._scan_line(stream, line))

        if stream == self.json_stream:
            events.extend(self._try_json(stream, buffer, text))
        return events

    def _try_json(self, stream: str, buffer: _StreamBuffer, text: str) -> List[ProcessEvent]:
        if self._payload is not _MISSING:
            if not text.strip():
                return []
            # More output after a complete document; no longer a single document
            self._payload = _MISSING

        # A document can only be complete once the buffer ends with a closing bracket
        stripped = buffer.text.rstrip()
        if not stripped.endswith(('}', ']')):
            return []
        try:
            self._payload = json.loads(stripped)
        except ValueError:
            return []

        if self._json_emitted:
            return []
        self._json_emitted = True
        logger.debug(f"Parsed JSON document from {stream} ({len(stripped)} chars)")
        return [JsonPayload(stream, self._payload)]

    def _scan_line(self, stream: str, line: str) -> List[ProcessEvent]:
        events: List[ProcessEvent] = []
        line = line.strip()
        if not line:
            return events

        for category, pattern in self.filename_patterns:
            match = pattern.search(line)
            if match:
                path = match.groupdict().get('path') or match.group(1)
                event = MatchedFilename(stream, category, path.strip())
                self.matches.append(event)
                events.append(event)

        if self.progress_pattern is not None:
            match = self.progress_pattern.search(line)
            if match:
                self.last_progress = timestamp_to_seconds(match.group(1))
                events.append(ProgressTimestamp(stream, self.last_progress))

        return events
