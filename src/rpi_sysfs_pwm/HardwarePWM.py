import logging
import math
import os
import time
from typing import Optional, Tuple, Union

from . import config
from .errors import (
    DisableError,
    EnableError,
    ExportError,
    InvalidPeriodError,
    InvalidPulseError,
    ParseError,
    PermissionTimeoutError,
    PWMError,
    ReadError,
    UnexportError,
)

logger = logging.getLogger(__name__)


def _chip_name(chip: Union[str, int]) -> str:
    if isinstance(chip, int):
        if chip < 0:
            raise ValueError("Chip must be non-negative")
        return f"pwmchip{chip}"
    return str(chip)


def _channel_name(channel: Union[str, int]) -> str:
    if isinstance(channel, int) and channel < 0:
        raise ValueError("Channel must be non-negative")
    return str(channel)


class HardwarePWM:
    """Handle for one PWM channel exposed through sysfs.

    ``pulse_ns``, ``period_ns`` and ``enabled`` mirror what this handle last
    wrote to (or read from) the kernel. They are a cache: if another process
    touches the channel they go stale until one of the ``get_*_from_os``
    methods or ``refresh()`` is called.

    Pulse must always stay below period; the kernel rejects any write that
    would break that.
    """

    def __init__(self, chip: Union[str, int], channel: Union[str, int]):
        self._chip = _chip_name(chip)
        self._channel = _channel_name(channel)
        self.pulse_ns = 0
        self.period_ns = 0
        self.enabled = False
        self.exported = False

    @property
    def chip(self) -> str:
        return self._chip

    @property
    def channel(self) -> str:
        return self._channel

    @property
    def base_path(self) -> str:
        return os.path.join(config.SYSFS_PWM_ROOT, self._chip)

    @property
    def channel_path(self) -> str:
        return os.path.join(self.base_path, f"pwm{self._channel}")

    def __repr__(self) -> str:
        return (
            f"HardwarePWM(chip={self._chip!r}, channel={self._channel!r}, "
            f"pulse_ns={self.pulse_ns}, period_ns={self.period_ns}, "
            f"enabled={self.enabled}, exported={self.exported})"
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if not self.exported:
            return
        try:
            self.unexport()
        except UnexportError as e:
            logger.error("%s, handle=%r", e, self)
            if exc_type is None:
                raise

    def _error(self, error_cls: type, path: str, value=None, cause: Optional[Exception] = None) -> PWMError:
        return error_cls(self._chip, self._channel, path, value, cause)

    def _write_once(self, path: str, value) -> None:
        with open(path, "w") as f:
            f.write(str(value))

    def _write(self, path: str, value, error_cls: type) -> None:
        logger.debug("write %s <- %s", path, value)
        try:
            self._write_once(path, value)
        except OSError as e:
            raise self._error(error_cls, path, value, e) from e

    def _write_node(self, name: str, value, error_cls: type) -> None:
        if not self.exported:
            logger.warning("Writing %s on a channel that is not exported: %r", name, self)
        self._write(os.path.join(self.channel_path, name), value, error_cls)

    def _read_int(self, name: str) -> int:
        path = os.path.join(self.channel_path, name)
        try:
            with open(path, "rb") as f:
                data = f.read()
        except OSError as e:
            raise self._error(ReadError, path, cause=e) from e
        logger.debug("read %s -> %r", path, data)

        try:
            return int(data.decode("ascii").strip())
        except (UnicodeDecodeError, ValueError) as e:
            raise self._error(ParseError, path, data, e) from e

    def export(self) -> None:
        """Ask the kernel to reserve this channel."""
        self._write(os.path.join(self.base_path, "export"), self._channel, ExportError)
        self.exported = True
        logger.info("Exported %s/pwm%s", self._chip, self._channel)

    def unexport(self) -> None:
        """Release the kernel's reservation. Call once per successful export."""
        if not self.exported:
            logger.warning("Unexporting a channel that is not exported: %r", self)
        self._write(os.path.join(self.base_path, "unexport"), self._channel, UnexportError)
        self.exported = False
        logger.info("Unexported %s/pwm%s", self._chip, self._channel)

    def set_pulse(self, pulse_ns: int) -> None:
        """Set the high time in nanoseconds. Must be less than the period."""
        pulse_ns = int(pulse_ns)
        if pulse_ns < 0:
            raise ValueError("Pulse width must be non-negative")

        self._write_node("duty_cycle", pulse_ns, InvalidPulseError)
        self.pulse_ns = pulse_ns

    def set_period(self, period_ns: int) -> None:
        """Set the period in nanoseconds. Must be greater than the pulse."""
        period_ns = int(period_ns)
        if period_ns < 0:
            raise ValueError("Period must be non-negative")

        self._write_node("period", period_ns, InvalidPeriodError)
        self.period_ns = period_ns

    def get_pulse_from_os(self) -> int:
        self.pulse_ns = self._read_int("duty_cycle")
        return self.pulse_ns

    def get_period_from_os(self) -> int:
        self.period_ns = self._read_int("period")
        return self.period_ns

    def enable(self) -> None:
        self._write_node("enable", 1, EnableError)
        self.enabled = True

    def disable(self) -> None:
        self._write_node("enable", 0, DisableError)
        self.enabled = False

    def get_is_enabled_from_os(self) -> bool:
        self.enabled = self._read_int("enable") > 0
        return self.enabled

    def refresh(self) -> "HardwarePWM":
        """Re-read pulse, period and enable state from the kernel."""
        self.get_pulse_from_os()
        self.get_period_from_os()
        self.get_is_enabled_from_os()
        return self

    def configure(
        self,
        pulse_ns: int,
        period_ns: int,
        wait_for_permission: float = config.WAIT_FOR_PERMISSION_S,
        poll_timeout: Optional[float] = None,
    ) -> None:
        """Bring a freshly exported channel to the given pulse and period.

        The smallest pulse is 0. The smallest period is 1 on a Pi 5 and 15 on
        a Pi 4 (kernel 6.1).

        Right after export the channel keeps whatever pulse it had before,
        which can make the new period write fail. The pulse is therefore
        zeroed before the period is set.
        """
        _check_timing(pulse_ns, period_ns)

        # udev hands the new nodes to userspace asynchronously
        time.sleep(wait_for_permission)
        if poll_timeout is not None:
            self.wait_for_permissions(poll_timeout)

        if self.get_pulse_from_os() > 0:
            self.set_pulse(0)

        self.set_period(period_ns)
        self.set_pulse(pulse_ns)
        logger.info("Initialized %r", self)

    def wait_for_permissions(
        self,
        timeout: float = 1.0,
        interval: float = config.PERMISSION_POLL_INTERVAL_S,
        names: Tuple[str, ...] = ("period", "duty_cycle", "enable"),
    ) -> None:
        """Poll until every named node is writable by this process."""
        start = time.time()
        pending = [os.path.join(self.channel_path, name) for name in names]
        while True:
            pending = [path for path in pending if not os.access(path, os.W_OK)]
            if not pending:
                return
            if time.time() - start >= timeout:
                break
            time.sleep(interval)

        raise self._error(PermissionTimeoutError, pending[0])

    def duty_cycle_to_pulse(self, duty_cycle: float) -> int:
        return duty_cycle_to_pulse(self, duty_cycle)


def export(chip: Union[str, int], channel: Union[str, int]) -> HardwarePWM:
    """Export a channel and return its handle (pulse, period zeroed)."""
    handle = HardwarePWM(chip, channel)
    handle.export()
    return handle


def frequency_to_period(frequency_hz: float) -> int:
    """Period in nanoseconds for a frequency in hertz; 0 if frequency <= 0.

    Halves round up (2.5 ns -> 3 ns).
    """
    if frequency_hz <= 0:
        return 0
    return int(math.floor(1e9 / frequency_hz + 0.5))


def duty_cycle_to_pulse(handle: HardwarePWM, duty_cycle: float) -> int:
    """Pulse in nanoseconds for a duty cycle in percent of the handle's period.

    The result is clamped to ``period_ns - 1`` so it stays below the period,
    even at 100 %.
    """
    period_ns = handle.period_ns
    pulse_ns = int(period_ns * duty_cycle / 100.0)
    if pulse_ns >= period_ns:
        pulse_ns = period_ns - 1
    return max(pulse_ns, 0)


def _check_timing(pulse_ns: int, period_ns: int) -> None:
    if pulse_ns < 0:
        raise ValueError("Pulse width must be non-negative")
    if period_ns < 0:
        raise ValueError("Period must be non-negative")


def initialize(
    chip: Union[str, int],
    channel: Union[str, int],
    pulse_ns: int,
    period_ns: int,
    wait_for_permission: float = config.WAIT_FOR_PERMISSION_S,
    poll_timeout: Optional[float] = None,
) -> HardwarePWM:
    """Export a channel and bring it to the given pulse and period.

    On failure the first error is raised with the handle built so far
    attached as ``error.handle``; unexporting it is up to the caller.
    """
    _check_timing(pulse_ns, period_ns)

    handle = HardwarePWM(chip, channel)
    try:
        handle.export()
        handle.configure(pulse_ns, period_ns, wait_for_permission, poll_timeout)
    except PWMError as e:
        e.handle = handle
        raise

    return handle
