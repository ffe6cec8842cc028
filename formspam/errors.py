"""Exception types raised by formspam."""

from typing import Optional


class ConfigError(ValueError):
    """A field file or run profile could not be used.

    ``line_no`` is 1-based and, like ``line``, is ``None`` for errors that
    do not belong to a single line of the field file.
    """

    def __init__(self, reason: str, line: Optional[str] = None,
                 line_no: Optional[int] = None):
        self.reason = reason
        self.line = line
        self.line_no = line_no
        super().__init__(self._render())

    def _render(self) -> str:
        if self.line_no is None and self.line is None:
            return self.reason
        if self.line_no is None:
            return f"{self.reason}: {self.line!r}"
        return f"line {self.line_no}: {self.reason}: {self.line!r}"


class GenerationError(RuntimeError):
    """A field cannot produce a value (invariant broken after parsing)."""


class SignalError(RuntimeError):
    """The interrupt handler could not be installed."""
