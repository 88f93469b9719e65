"""Console display of the strand store."""

import logging
from collections.abc import Callable
from threading import Lock

import click

from fakecandy.protocols import StrandEvent

from .strand import StrandStore

logger = logging.getLogger(__name__)


class ConsoleStrandRenderer:
    """
    Print every strand as a row of colored glyphs whenever it changes.

    Implements the StrandObserver protocol. Rows are written in configured
    channel order, one line per channel, with each LED styled in its
    rendered (color corrected) RGB value.
    """

    def __init__(
        self,
        store: StrandStore,
        led_char: str = "◉",
        echo: Callable[[str], None] | None = None,
        color: bool | None = None,
    ) -> None:
        self.store = store
        self.led_char = led_char
        self._echo = echo or click.echo
        self._color = color
        # Concurrent transports may notify at once; keep frames whole
        self._lock = Lock()

    def format_strands(self) -> str:
        """Render the current store contents as styled text."""
        rows = []
        for _channel, pixels in self.store.render():
            rows.append("".join(click.style(self.led_char, fg=pixel) for pixel in pixels))
        return "\n".join(rows)

    def draw(self) -> None:
        text = self.format_strands()
        with self._lock:
            if self._echo is click.echo:
                click.echo(text, color=self._color)
            else:
                self._echo(text)

    def on_strand_event(self, event: StrandEvent, channel: int | None) -> None:
        logger.debug(f"Redrawing strands after {event.value} (channel {channel})")
        self.draw()
