import errno
import os
import shutil

import pytest

from rpi_sysfs_pwm import config
from rpi_sysfs_pwm.HardwarePWM import HardwarePWM


class FakeKernel:
    """Minimal stand-in for the kernel side of /sys/class/pwm.

    Nodes are real files under a temporary directory; writes go through
    ``write`` which applies the same checks the PWM core does.
    """

    def __init__(self, root):
        self.root = str(root)
        self.writes = []
        self.npwm = {}
        # pulse/period/enable a channel comes up with after export
        self.initial = {}

    def add_chip(self, chip: str = "pwmchip2", npwm: int = 4) -> None:
        os.makedirs(os.path.join(self.root, chip))
        for name in ("export", "unexport"):
            open(os.path.join(self.root, chip, name), "w").close()
        self.npwm[chip] = npwm

    def channel_dir(self, chip: str, channel) -> str:
        return os.path.join(self.root, chip, f"pwm{channel}")

    def read(self, chip: str, channel, node: str) -> int:
        with open(os.path.join(self.channel_dir(chip, channel), node)) as f:
            return int(f.read())

    def _store(self, path: str, value) -> None:
        if isinstance(value, bytes):
            with open(path, "wb") as f:
                f.write(value)
            return
        with open(path, "w") as f:
            f.write(f"{value}\n")

    def write(self, path: str, value) -> None:
        value = str(value)
        node_dir, node = os.path.split(path)
        self.writes.append((node, value))

        if node in ("export", "unexport"):
            chip = os.path.basename(node_dir)
            if chip not in self.npwm:
                raise FileNotFoundError(errno.ENOENT, "No such file or directory", path)
            if not value.isdigit() or int(value) >= self.npwm[chip]:
                raise OSError(errno.EINVAL, "Invalid argument", path)
            channel_dir = self.channel_dir(chip, value)
            if node == "export":
                if os.path.isdir(channel_dir):
                    raise OSError(errno.EBUSY, "Device or resource busy", path)
                os.makedirs(channel_dir)
                pulse, period, enabled = self.initial.get((chip, value), (0, 0, 0))
                self._store(os.path.join(channel_dir, "duty_cycle"), pulse)
                self._store(os.path.join(channel_dir, "period"), period)
                self._store(os.path.join(channel_dir, "enable"), enabled)
            else:
                if not os.path.isdir(channel_dir):
                    raise OSError(errno.EINVAL, "Invalid argument", path)
                shutil.rmtree(channel_dir)
            return

        if not os.path.isdir(node_dir):
            raise FileNotFoundError(errno.ENOENT, "No such file or directory", path)

        number = int(value)
        with open(os.path.join(node_dir, "duty_cycle")) as f:
            pulse = int(f.read())
        with open(os.path.join(node_dir, "period")) as f:
            period = int(f.read())

        if node == "duty_cycle" and number > 0 and number >= period:
            raise OSError(errno.EINVAL, "Invalid argument", path)
        if node == "period" and (number < 1 or (pulse > 0 and number <= pulse)):
            raise OSError(errno.EINVAL, "Invalid argument", path)
        if node == "enable" and number not in (0, 1):
            raise OSError(errno.EINVAL, "Invalid argument", path)

        self._store(path, number)


@pytest.fixture
def kernel(tmp_path, monkeypatch):
    """Point the library at a fake sysfs tree with one chip, pwmchip2."""
    fake = FakeKernel(tmp_path)
    fake.add_chip("pwmchip2")
    monkeypatch.setattr(config, "SYSFS_PWM_ROOT", str(tmp_path))
    monkeypatch.setattr(HardwarePWM, "_write_once", lambda self, path, value: fake.write(path, value))
    monkeypatch.setattr("time.sleep", lambda s: None)
    return fake


@pytest.fixture
def pwm(kernel):
    """An exported handle on pwmchip2/pwm2 with period 1000ns and pulse 0."""
    handle = HardwarePWM("pwmchip2", "2")
    handle.export()
    handle.set_period(1000)
    return handle
