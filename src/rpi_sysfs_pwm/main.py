import argparse
import logging
import time
from typing import List, Optional

from . import config
from .errors import PWMError
from .HardwarePWM import HardwarePWM, duty_cycle_to_pulse, frequency_to_period

logger = logging.getLogger(__name__)


def run_servo(pwm: HardwarePWM, hold: float) -> None:
    pwm.enable()

    for pulse_ns in [config.SERVO_MIN_PULSE_NS, config.SERVO_MAX_PULSE_NS, config.SERVO_NEUTRAL_PULSE_NS]:
        print(f"Servo pulse {pulse_ns // 1000}μs ...")
        pwm.set_pulse(pulse_ns)
        time.sleep(hold)

    pwm.disable()


def run_blink(pwm: HardwarePWM, hold: float) -> None:
    pwm.enable()
    print("LED should blink ...")
    time.sleep(hold)

    pwm.set_period(frequency_to_period(0.5))
    print("LED should blink slower ...")
    time.sleep(hold)

    pwm.set_pulse(duty_cycle_to_pulse(pwm, 75.0))
    print("LED should blink longer ...")
    time.sleep(hold)

    pwm.disable()


DEMOS = {
    "servo": (run_servo, config.SERVO_NEUTRAL_PULSE_NS, config.SERVO_PERIOD_NS),
    "blink": (run_blink, config.BLINK_PULSE_NS, config.BLINK_PERIOD_NS),
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rpi-sysfs-pwm", description="Drive a hardware PWM channel through sysfs."
    )
    parser.add_argument("demo", choices=sorted(DEMOS))
    parser.add_argument("--chip", default=config.DEFAULT_CHIP, help="e.g. pwmchip0 (Pi 4) or pwmchip2 (Pi 5)")
    parser.add_argument("--channel", default=config.DEFAULT_CHANNEL)
    parser.add_argument(
        "--wait",
        type=float,
        default=config.WAIT_FOR_PERMISSION_S,
        help="seconds to wait for sysfs permissions after export",
    )
    parser.add_argument("--hold", type=float, default=2.0, help="seconds per demo step")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    demo, pulse_ns, period_ns = DEMOS[args.demo]

    pwm = HardwarePWM(args.chip, args.channel)
    try:
        pwm.export()
    except PWMError as e:
        logger.error("%s, handle=%r", e, pwm)
        return 1

    # from here on the channel is released on every exit path
    try:
        with pwm:
            pwm.configure(pulse_ns, period_ns, args.wait)
            demo(pwm, args.hold)
    except KeyboardInterrupt:
        print("Interrupted, channel released.")
        return 130
    except PWMError as e:
        logger.error("%s, handle=%r", e, pwm)
        return 1

    print("Done")
    return 0
