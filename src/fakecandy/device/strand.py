"""Per-channel pixel buffers shared by every control transport."""

import logging
from threading import Lock

import numpy as np

from fakecandy.exceptions import UnknownChannelError
from fakecandy.models import Color
from fakecandy.opc import Whitepoint
from fakecandy.protocols import StrandEvent, StrandObserver
from fakecandy.utils import ObserverManager

logger = logging.getLogger(__name__)

NEUTRAL_WHITEPOINT: Whitepoint = (1.0, 1.0, 1.0)

RgbPixel = tuple[int, int, int]


class StrandStore:
    """
    Device-visible color state: one pixel buffer per OPC channel.

    The channel set is fixed at construction. Buffers hold raw wire bytes
    (R, G, B per pixel) exactly as last written; the global color
    correction whitepoint is applied only when rendering.

    Thread Safety:
        One lock guards every buffer and the whitepoint, so reads and
        writes from different transports are atomic with respect to each
        other. Observers are notified after the lock is released.
    """

    def __init__(self, channels, led_count: int, fill_color: Color | None = None) -> None:
        """
        Initialize the store.

        Args:
            channels: Configured OPC channels, in display order
            led_count: Pixels per strand
            fill_color: Initial color of every pixel (default white)
        """
        fill = (fill_color or Color.white()).to_bytes()
        self._channels: tuple[int, ...] = tuple(channels)
        self._led_count = led_count
        self._lock = Lock()
        self._buffers: dict[int, bytes] = {channel: fill * led_count for channel in self._channels}
        self._whitepoint: Whitepoint = NEUTRAL_WHITEPOINT
        # ObserverManager has its own lock
        self._observers = ObserverManager[StrandObserver](observer_type_name="strand")

    @property
    def channels(self) -> tuple[int, ...]:
        return self._channels

    @property
    def led_count(self) -> int:
        return self._led_count

    @property
    def whitepoint(self) -> Whitepoint:
        """Current global color correction (1.0 = unscaled)."""
        with self._lock:
            return self._whitepoint

    def register_observer(self, observer: StrandObserver) -> None:
        self._observers.register(observer)

    def unregister_observer(self, observer: StrandObserver) -> None:
        self._observers.unregister(observer)

    def has_channel(self, channel: int) -> bool:
        return channel in self._buffers

    def set_pixels(self, channel: int, buffer: bytes) -> None:
        """
        Replace a channel's pixel buffer.

        The buffer is stored as given, whatever its length; other channels
        are untouched.

        Raises:
            UnknownChannelError: If the channel was not configured
        """
        with self._lock:
            if channel not in self._buffers:
                raise UnknownChannelError(channel, self._channels)
            self._buffers[channel] = bytes(buffer)

        logger.debug(f"Channel {channel}: {len(buffer) // 3} pixels set")
        self._observers.notify("on_strand_event", StrandEvent.PIXELS_SET, channel)

    def get_pixels(self, channel: int) -> bytes:
        """
        Read a channel's raw pixel buffer.

        Raises:
            UnknownChannelError: If the channel was not configured
        """
        with self._lock:
            try:
                return self._buffers[channel]
            except KeyError:
                raise UnknownChannelError(channel, self._channels) from None

    def set_color_correction(self, whitepoint: Whitepoint) -> None:
        """Set the global whitepoint applied to every channel when rendering."""
        whitepoint = (float(whitepoint[0]), float(whitepoint[1]), float(whitepoint[2]))
        with self._lock:
            self._whitepoint = whitepoint

        logger.debug(f"Whitepoint set to {whitepoint}")
        self._observers.notify("on_strand_event", StrandEvent.COLOR_CORRECTED, None)

    def render(self) -> list[tuple[int, list[RgbPixel]]]:
        """
        Snapshot of every channel as displayed colors.

        Returns:
            (channel, pixels) pairs in configured order. Each pixel is scaled
            by the whitepoint; trailing bytes that do not form a whole pixel
            are ignored.
        """
        with self._lock:
            snapshot = [(channel, self._buffers[channel]) for channel in self._channels]
            whitepoint = np.asarray(self._whitepoint, dtype=np.float64)

        rendered = []
        for channel, buffer in snapshot:
            usable = len(buffer) - len(buffer) % 3
            if not usable:
                rendered.append((channel, []))
                continue
            pixels = np.frombuffer(buffer, dtype=np.uint8, count=usable).reshape(-1, 3)
            scaled = np.clip(np.rint(pixels * whitepoint), 0, 255).astype(np.uint8)
            rendered.append((channel, [tuple(int(v) for v in pixel) for pixel in scaled]))
        return rendered
