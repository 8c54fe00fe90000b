"""
Run one external process and feed its output to a StreamOutputParser.

Each invocation is a small state machine: it starts ``PENDING``, becomes
``RUNNING`` once the child is spawned and ends in ``EXITED`` (status 0) or
``FAILED`` (spawn error, non-zero status, unparseable output, timeout or
cancellation). Output chunks are handled on the event loop as they arrive;
the coroutine only suspends while waiting for the next chunk or for the exit.
"""

import asyncio
import enum
import logging
import os
from typing import Callable, List, Optional, Sequence

from ..exceptions import ParseError, ProcessExitError, ProcessSpawnError, ProcessTimeoutError
from ..models import ProcessEvent, ProcessResult
from .parser import STDERR, STDOUT, StreamOutputParser

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
TERMINATE_GRACE_SECONDS = 5.0

EventCallback = Callable[[ProcessEvent], None]


class ProcessState(enum.Enum):
    PENDING = 'pending'
    RUNNING = 'running'
    EXITED = 'exited'
    FAILED = 'failed'


class ProcessInvocation:
    """
    A single run of an external program.

    Args:
        args: Program and arguments (no shell is involved)
        parser: Parser owning the output state of this run (default: a parser
            that only records output)
        on_event: Called synchronously with every event the parser produces
        timeout: Seconds to wait for the process to exit before terminating it
            (default: wait indefinitely)

    Example:
        >>> parser = StreamOutputParser(json_stream="stdout")
        >>> args = ["yt-dlp", "--dump-json", "https://youtu.be/dQw4w9WgXcQ"]
        >>> result = asyncio.run(ProcessInvocation(args, parser).run())
        >>> result.payload["title"]
    """

    def __init__(
        self,
        args: Sequence[str],
        parser: Optional[StreamOutputParser] = None,
        on_event: Optional[EventCallback] = None,
        timeout: Optional[float] = None
    ):
        if not args:
            raise ValueError("args must name a program")
        self.args: List[str] = [str(a) for a in args]
        self.parser = parser or StreamOutputParser(progress_pattern=None)
        self.on_event = on_event
        self.timeout = timeout
        self.state = ProcessState.PENDING
        self.returncode: Optional[int] = None

    @property
    def program(self) -> str:
        return os.path.basename(self.args[0])

    def _emit(self, events: List[ProcessEvent]) -> None:
        if self.on_event is None:
            return
        for event in events:
            self.on_event(event)

    async def _pump(self, reader: asyncio.StreamReader, stream: str) -> None:
        while True:
            chunk = await reader.read(CHUNK_SIZE)
            if not chunk:
                break
            self._emit(self.parser.feed(stream, chunk))

    async def _terminate(self, proc: asyncio.subprocess.Process) -> None:
        if proc.returncode is not None:
            return
        logger.warning(f"Terminating {self.program} (pid {proc.pid})")
        try:
            proc.terminate()
        except ProcessLookupError:
            return
        try:
            await asyncio.wait_for(proc.wait(), TERMINATE_GRACE_SECONDS)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()

    async def _communicate(self, proc: asyncio.subprocess.Process) -> int:
        pumps = [
            asyncio.ensure_future(self._pump(proc.stdout, STDOUT)),
            asyncio.ensure_future(self._pump(proc.stderr, STDERR)),
        ]
        try:
            await asyncio.gather(*pumps)
        finally:
            # A failed pump leaves its sibling running
            for pump in pumps:
                pump.cancel()
        return await proc.wait()

    async def run(self) -> ProcessResult:
        """
        Spawn the process, stream its output and wait for it to exit.

        Returns:
            ProcessResult with the captured output and the parser's findings

        Raises:
            ProcessSpawnError: If the program cannot be started
            ProcessExitError: If the program exits with a non-zero status
            ProcessTimeoutError: If ``timeout`` elapses first
            ParseError: If the parser expected JSON and did not get a document
            asyncio.CancelledError: If the awaiting task is cancelled (the
                child is terminated first)

        Exceptions raised by ``on_event`` also terminate the child and then
        propagate.
        """
        if self.state is not ProcessState.PENDING:
            raise RuntimeError(f"Invocation already {self.state.value}")

        logger.debug(f"Running: {' '.join(self.args)}")
        try:
            proc = await asyncio.create_subprocess_exec(
                *self.args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            self.state = ProcessState.FAILED
            raise ProcessSpawnError(self.program, e.strerror or str(e)) from e

        self.state = ProcessState.RUNNING
        try:
            if self.timeout is None:
                self.returncode = await self._communicate(proc)
            else:
                self.returncode = await asyncio.wait_for(self._communicate(proc), self.timeout)
        except asyncio.TimeoutError:
            self.state = ProcessState.FAILED
            await self._terminate(proc)
            raise ProcessTimeoutError(self.program, self.timeout) from None
        except BaseException:
            # Cancelled, or on_event raised
            self.state = ProcessState.FAILED
            await self._terminate(proc)
            raise

        if self.returncode != 0:
            self.state = ProcessState.FAILED
            self._emit(self.parser.close(check_json=False))
            stderr = self.parser.text(STDERR)
            logger.debug(f"{self.program} exited with {self.returncode}")
            raise ProcessExitError(self.program, self.returncode, stderr)

        try:
            self._emit(self.parser.close())
        except ParseError:
            self.state = ProcessState.FAILED
            raise

        self.state = ProcessState.EXITED
        return ProcessResult(
            args=self.args,
            returncode=self.returncode,
            stdout=self.parser.text(STDOUT),
            stderr=self.parser.text(STDERR),
            payload=self.parser.payload,
            matched_files=list(self.parser.matches),
        )


async def run_process(
    args: Sequence[str],
    parser: Optional[StreamOutputParser] = None,
    on_event: Optional[EventCallback] = None,
    timeout: Optional[float] = None
) -> ProcessResult:
    """Run ``args`` to completion. Convenience wrapper around ProcessInvocation."""
    return await ProcessInvocation(args, parser=parser, on_event=on_event, timeout=timeout).run()
