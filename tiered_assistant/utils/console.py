"""
Console I/O for the interactive session.

ConsoleReader is an async iterable of prompts read from the terminal,
plus the writer used to render labelled output lines. Blocking reads
run in a daemon thread so the event loop stays cooperative and an
interrupted session can exit while a read is still pending.
"""

import asyncio
import sys
import threading
from collections import deque
from dataclasses import dataclass
from typing import AsyncIterator, Deque, Optional, TextIO, Union

from rich.console import Console
from rich.text import Text

from ..core.errors import QuestionAborted
from .helpers import strip_ansi


@dataclass(frozen=True)
class PromptRecord:
    """One accepted line of user input."""
    prompt: str
    iteration: int


class ConsoleReader:
    """
    Interactive prompt source.

    Iterating yields PromptRecord values until the user enters ``q``,
    input ends, or ``close()`` is called. The sequence is not restartable.

    Example:
        reader = ConsoleReader(fallback="Hello")
        async for record in reader:
            reader.write("Echo", record.prompt)
    """

    BANNER = "Interactive session has started. To escape, input 'q' and submit."
    EMPTY_PROMPT_ERROR = "Error: Empty prompt is not allowed. Please try again."
    QUIT_TOKEN = "q"

    def __init__(
        self,
        fallback: Optional[str] = None,
        input_prompt: str = "User 👤 : ",
        allow_empty: bool = False,
        console: Optional[Console] = None,
        stream: Optional[TextIO] = None
    ):
        """
        Args:
            fallback: Prompt substituted for blank input
            input_prompt: Text shown before each read
            allow_empty: Yield blank prompts instead of re-prompting
            console: Rich console used for all output
            stream: Read lines from this stream instead of stdin
        """
        self.fallback = fallback
        self.input_prompt = input_prompt
        self.allow_empty = allow_empty
        self.console = console or Console(highlight=False)
        self.stream = stream
        self._active = True
        self._lines: Deque[Union[str, BaseException]] = deque()
        self._reading = False
        self._waiter: Optional[asyncio.Future] = None

    @property
    def is_active(self) -> bool:
        return self._active

    # ==================== Output ====================

    def write(self, role: str, data: str) -> None:
        """Write ``<role> <text>`` with a styled role and de-styled text."""
        text = Text()
        if role:
            text.append(role, style="bold red")
        data = strip_ansi(data or "")
        if role and data:
            text.append(" ")
        text.append(data)
        self.console.print(text, highlight=False, soft_wrap=True)

    def _notice(self, message: str, style: Optional[str] = None) -> None:
        self.console.print(Text(message, style=style or ""), highlight=False, soft_wrap=True)

    # ==================== Input ====================

    async def prompt(self) -> str:
        """
        Read a single accepted prompt outside the main loop.

        Exits the process with status 0 when input ends or ``q`` is entered.
        """
        record = await self._read_record(1) if self._active else None
        if record is None:
            self.close()
            sys.exit(0)
        return record.prompt

    async def ask_single_question(
        self,
        question: str,
        cancel: Optional[asyncio.Event] = None
    ) -> str:
        """
        Ask one question and return the trimmed, de-styled answer.

        A cancelled question leaves its pending line for the next read, so
        the user's next answer is never lost.

        Args:
            question: Text shown to the user
            cancel: Setting this event abandons the question

        Raises:
            QuestionAborted: if ``cancel`` was set, or the reader was closed,
                before an answer arrived
        """
        if cancel is not None and cancel.is_set():
            raise QuestionAborted(question)

        read = asyncio.ensure_future(self._read_line(question))
        if cancel is not None:
            aborted = asyncio.ensure_future(cancel.wait())
            done, _ = await asyncio.wait(
                {read, aborted}, return_when=asyncio.FIRST_COMPLETED
            )
            aborted.cancel()
            if read not in done:
                read.cancel()
                raise QuestionAborted(question)

        try:
            answer = await read
        except EOFError:
            if self._active:
                raise
            raise QuestionAborted(question) from None

        return strip_ansi(answer).strip()

    def close(self) -> None:
        """Stop yielding prompts and release any pending read."""
        self._active = False
        self._wake()

    async def __aiter__(self) -> AsyncIterator[PromptRecord]:
        if not self._active:
            return

        try:
            self._notice(self.BANNER, style="dim")
            iteration = 1
            while self._active:
                record = await self._read_record(iteration)
                if record is None:
                    break
                yield record
                iteration += 1
        finally:
            self.close()

    async def _read_record(self, iteration: int) -> Optional[PromptRecord]:
        """Read until a prompt is accepted; None on quit, close or end of input."""
        while self._active:
            try:
                line = await self._read_line(self.input_prompt)
            except EOFError:
                return None
            if not self._active:
                return None

            prompt = strip_ansi(line)
            if prompt.strip() == self.QUIT_TOKEN:
                return None
            if not prompt.strip():
                prompt = self.fallback or ""
            if not self.allow_empty and not prompt.strip():
                self._notice(self.EMPTY_PROMPT_ERROR)
                continue
            return PromptRecord(prompt=prompt, iteration=iteration)
        return None

    # ==================== Line Buffer ====================

    async def _read_line(self, prompt: str) -> str:
        """
        Return the next line of input.

        At most one blocking read is in flight. It runs in a daemon thread
        and appends its line to ``_lines``; callers only wait on that
        buffer, so cancelling a caller consumes nothing.

        Raises:
            EOFError: at end of input, or once the reader is closed
        """
        if not self._lines and not self._active:
            raise EOFError

        if not self._lines and not self._reading:
            self._reading = True
            threading.Thread(
                target=self._read_worker,
                args=(Text(prompt, style="bold cyan"),),
                name="console-input",
                daemon=True
            ).start()

        loop = asyncio.get_running_loop()
        while True:
            waiter = loop.create_future()
            self._waiter = waiter
            if self._lines:
                break
            if not self._active:
                raise EOFError
            await waiter

        item = self._lines.popleft()
        if isinstance(item, BaseException):
            raise item
        return item

    def _read_worker(self, prompt: Text) -> None:
        try:
            item: Union[str, BaseException] = self._input(prompt)
        except Exception as e:
            item = e
        self._lines.append(item)
        self._reading = False
        self._wake()

    def _wake(self) -> None:
        waiter = self._waiter
        if waiter is None:
            return
        try:
            waiter.get_loop().call_soon_threadsafe(_resolve, waiter)
        except RuntimeError:
            # Nobody is waiting: the loop that created the waiter has closed
            pass

    def _input(self, prompt: Text) -> str:
        line = self.console.input(prompt, stream=self.stream)
        if self.stream is not None and line == "":
            raise EOFError
        return line.rstrip("\r\n")


def _resolve(waiter: asyncio.Future) -> None:
    if not waiter.done():
        waiter.set_result(None)
