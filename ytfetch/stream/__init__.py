"""
Process output streaming.

Runs external programs one invocation at a time and extracts structured
events from their output as it arrives.
"""

from .parser import (
    STDOUT,
    STDERR,
    PROGRESS_PATTERN,
    YTDLP_FILENAME_PATTERNS,
    LineSplitter,
    StreamOutputParser,
)
from .runner import ProcessState, ProcessInvocation, run_process

__all__ = [
    "STDOUT",
    "STDERR",
    "PROGRESS_PATTERN",
    "YTDLP_FILENAME_PATTERNS",
    "LineSplitter",
    "StreamOutputParser",
    "ProcessState",
    "ProcessInvocation",
    "run_process",
]
