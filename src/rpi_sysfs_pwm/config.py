import os

# Root of the kernel's PWM class directory. Read at call time, so it can be
# repointed (tests, chroots) by assigning to this attribute.
SYSFS_PWM_ROOT = os.environ.get("RPI_SYSFS_PWM_ROOT", "/sys/class/pwm")

# Raspberry Pi 4: chip=pwmchip0, channels 0 and 1 on GPIO18 and GPIO19
# Raspberry Pi 5: chip=pwmchip2, channels 2 and 3 on GPIO18 and GPIO19
DEFAULT_CHIP = "pwmchip2"
DEFAULT_CHANNEL = "2"

# Time the kernel/udev needs to hand the new nodes to userspace after export.
WAIT_FOR_PERMISSION_S = 0.5
PERMISSION_POLL_INTERVAL_S = 0.05

# Servo timing in nanoseconds
SERVO_PERIOD_NS = 20_000_000
SERVO_MIN_PULSE_NS = 500_000
SERVO_NEUTRAL_PULSE_NS = 1_500_000
SERVO_MAX_PULSE_NS = 2_500_000

# Blink timing in nanoseconds
BLINK_PERIOD_NS = 1_000_000_000
BLINK_PULSE_NS = 500_000_000
