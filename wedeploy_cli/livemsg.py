"""
Live terminal messages

A header line plus one line per tracked item, each with a spinner while
running and a symbol once finished. Rendered through rich.live.Live.
"""

import threading
import time
from typing import List, Optional

from rich.console import Console, Group
from rich.live import Live
from rich.padding import Padding
from rich.spinner import Spinner
from rich.text import Text

from wedeploy_cli.ui_components import SUCCESS_SYMBOL, ERROR_SYMBOL


class Message:
    """Single live line. Thread-safe."""

    def __init__(self, text: str = ""):
        self._lock = threading.Lock()
        self._text = text
        self._done = False
        self._error = False

    def play_text(self, text: str) -> None:
        """Update the text while keeping the spinner."""
        with self._lock:
            self._text = text
            self._done = False
            self._error = False

    def stop_text(self, text: str) -> None:
        """Finish the line with the success symbol."""
        with self._lock:
            self._text = text
            self._done = True
            self._error = False

    def fail_text(self, text: str) -> None:
        """Finish the line with the error symbol."""
        with self._lock:
            self._text = text
            self._done = True
            self._error = True

    def get_text(self) -> str:
        with self._lock:
            return self._text

    @property
    def done(self) -> bool:
        with self._lock:
            return self._done

    @property
    def failed(self) -> bool:
        with self._lock:
            return self._error

    def render(self):
        with self._lock:
            text, done, error = self._text, self._done, self._error

        if not done:
            return Padding(Spinner("dots", text=Text(text, style="cyan")), (0, 0, 0, 2))
        if error:
            line = Text(f"  {ERROR_SYMBOL} ", style="red")
            line.append(text, style="dim")
            return line
        line = Text(f"  {SUCCESS_SYMBOL} ", style="dim")
        line.append(text, style="dim")
        return line


class WaitLiveMsg:
    """
    Live region with a header and a list of Messages.

    start() begins rendering, stop() freezes the final frame.
    """

    def __init__(self, header: str = "", console: Optional[Console] = None):
        self.header = Message(header)
        self.messages: List[Message] = []
        self.console = console or Console()
        self._lock = threading.Lock()
        self._live: Optional[Live] = None
        self._started_at = time.monotonic()

    def add_message(self, message: Message) -> Message:
        with self._lock:
            self.messages.append(message)
        return message

    def reset_duration(self) -> None:
        self._started_at = time.monotonic()

    def duration(self) -> float:
        return time.monotonic() - self._started_at

    def __rich__(self):
        with self._lock:
            messages = list(self.messages)
        header = self.header.get_text()
        lines = [Text(header, style="bold white")] if header else []
        lines.extend(m.render() for m in messages)
        return Group(*lines)

    def start(self) -> "WaitLiveMsg":
        self.reset_duration()
        if self._live is None:
            self._live = Live(self, console=self.console, refresh_per_second=10)
            self._live.start()
        return self

    def refresh(self) -> None:
        if self._live is not None:
            self._live.refresh()

    def stop(self) -> None:
        if self._live is not None:
            self._live.refresh()
            self._live.stop()
            self._live = None

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False


def format_duration(seconds: float) -> str:
    """Human friendly duration: 850ms, 12s, 2m5s."""
    if seconds < 1:
        return f"{int(seconds * 1000)}ms"
    if seconds < 60:
        return f"{int(seconds)}s"
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}m{secs}s"
