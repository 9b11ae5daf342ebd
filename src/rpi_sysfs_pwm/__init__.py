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
    WriteConfigError,
)
from .HardwarePWM import (
    HardwarePWM,
    duty_cycle_to_pulse,
    export,
    frequency_to_period,
    initialize,
)

__version__ = "1.0.0"
