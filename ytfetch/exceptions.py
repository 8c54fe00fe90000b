"""Exceptions raised by ytfetch."""

from typing import Optional


class YtFetchError(Exception):
    """Base class for all ytfetch errors."""
    pass


class ProcessSpawnError(YtFetchError):
    """An external binary could not be started (not installed, not executable)."""

    def __init__(self, program: str, reason: str):
        self.program = program
        self.reason = reason
        super().__init__(f"Could not start {program}: {reason}")


class ProcessExitError(YtFetchError):
    """
    An external binary exited with a non-zero status.

    The full error output is kept on ``stderr``; the message only carries its
    last non-empty line, which is where yt-dlp and ffmpeg report the failure.
    """

    def __init__(self, program: str, returncode: int, stderr: str = ""):
        self.program = program
        self.returncode = returncode
        self.stderr = stderr
        lines = [line.strip() for line in stderr.splitlines() if line.strip()]
        detail = lines[-1] if lines else ""
        message = f"{program} failed with exit code {returncode}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ProcessTimeoutError(YtFetchError):
    """An external binary did not exit within the allowed time and was terminated."""

    def __init__(self, program: str, timeout: float):
        self.program = program
        self.timeout = timeout
        super().__init__(f"{program} did not finish within {timeout:g}s")


class ParseError(YtFetchError):
    """Process output or a produced file could not be interpreted."""
    pass


class FileIOError(YtFetchError, OSError):
    """Reading or writing a file on disk failed."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class ValidationError(YtFetchError, ValueError):
    """Caller-supplied input is malformed."""
    pass
