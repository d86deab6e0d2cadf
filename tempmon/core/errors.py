# tempmon/core/errors.py
from __future__ import annotations


class TempMonError(Exception):
    """
    Failure the monitor expects and reports instead of crashing on.

    The CLI prints `message` and, when set, `hint`; `details` carries the
    offending values (path, company id, config key) for log lines.
    """

    #: Short identifier that stays fixed across message rewording
    code: str = "unknown"

    def __init__(self, message: str, *, hint: str | None = None, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.hint = hint
        self.details = dict(details) if details else {}

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------

class ConfigError(TempMonError):
    """
    Configuration value is invalid.

    Examples:
      - negative scan timeout / pause / duplicate threshold
      - unknown key passed to `config set`
      - value that cannot be converted to the field type
    """
    code = "config_error"


# ---------------------------------------------------------------------------
# Data errors
# ---------------------------------------------------------------------------

class DecodeError(TempMonError):
    """
    Manufacturer data could not be decoded into a reading.

    Examples:
      - advertisement carries no manufacturer data
      - manufacturer payload shorter than 2 bytes
    """
    code = "decode_error"


class PersistenceError(TempMonError):
    """
    Daily log could not be opened or written.
    """
    code = "persistence_error"


# ---------------------------------------------------------------------------
# Pipeline errors
# ---------------------------------------------------------------------------

class ChannelClosedError(TempMonError):
    """
    Message channel was closed (the receiving side is gone).
    """
    code = "channel_closed"
