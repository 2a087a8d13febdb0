# --- Error types -------------------------------------------------------------
from typing import Optional


class GomsortError(Exception):
    """Base class for everything gomsort raises on purpose."""


class ParseError(GomsortError):
    """
    The source could not be parsed as Go. Raised before any sorting happens,
    so the file is never touched.
    """

    def __init__(self, filename: Optional[str], line: int, col: int, detail: str = "syntax error"):
        self.filename = filename
        self.line = line
        self.col = col
        self.detail = detail
        where = filename or "<source>"
        super().__init__(f"{where}:{line + 1}:{col + 1}: {detail}")


class RenderError(GomsortError):
    """The rewritten file no longer renders into valid Go."""

    def __init__(self, filename: Optional[str], detail: str):
        self.filename = filename
        self.detail = detail
        super().__init__(f"{filename or '<source>'}: {detail}")


class ConfigError(GomsortError):
    """A configuration file exists but holds invalid JSON or values."""
