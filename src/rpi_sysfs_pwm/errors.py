class PWMError(IOError):
    """Base class for sysfs PWM errors.

    Carries the channel context (chip, channel, sysfs node, attempted value)
    and the errno of the underlying OS error, if there was one.
    """

    action = "accessing PWM channel"
    # set by initialize() to the handle built before the failure
    handle = None

    def __init__(self, chip=None, channel=None, path=None, value=None, cause=None):
        self.chip = chip
        self.channel = channel
        self.path = path
        self.value = value
        self.cause = cause
        err = getattr(cause, "errno", None)
        super().__init__(err, self._describe())

    def _describe(self) -> str:
        msg = f"error {self.action}, chip=[{self.chip}], channel=[{self.channel}], sysfs=[{self.path}]"
        if self.value is not None:
            msg += f", value=[{self.value}]"
        if self.cause is not None:
            msg += f", error=[{self.cause}]"
        return msg

    def __str__(self) -> str:
        return self._describe()


class ExportError(PWMError):
    action = "exporting PWM channel"


class UnexportError(PWMError):
    action = "unexporting PWM channel"


class WriteConfigError(PWMError):
    action = "writing PWM channel configuration"


class InvalidPulseError(WriteConfigError):
    action = "setting pulse width for PWM channel"


class InvalidPeriodError(WriteConfigError):
    action = "setting period width for PWM channel"


class EnableError(WriteConfigError):
    action = "enabling PWM channel"


class DisableError(WriteConfigError):
    action = "disabling PWM channel"


class ReadError(PWMError):
    action = "reading PWM channel node"


class ParseError(PWMError, ValueError):
    action = "converting PWM channel node content"


class PermissionTimeoutError(PWMError, TimeoutError):
    action = "waiting for write access to PWM channel"
