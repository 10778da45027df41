"""Custom exceptions for the rendering context."""

from pathlib import Path
from typing import Optional


class ConfigurationError(Exception):
    """
    Exception raised before any engine process starts, when the engine cannot run.

    Attributes:
        message: User-facing description
        install_location: Where the engine bundle is expected, if relevant
    """

    def __init__(self, message: str, install_location: Optional[Path] = None):
        self.message = message
        self.install_location = install_location
        super().__init__(message)


class RenderError(Exception):
    """
    Exception raised when one page of a diagram fails to render.

    The message is already qualified with the diagram title. Whatever the engine
    wrote to stdout before failing is kept in ``out`` for diagnostic display.

    Attributes:
        message: Title-qualified error description
        out: Partial engine output
    """

    def __init__(self, message: str, out: bytes = b""):
        self.message = message
        self.out = out
        super().__init__(message)


class ProcessOutputError(Exception):
    """
    Exception raised when an engine process exits unsuccessfully.

    Attributes:
        error: Error text reported by the process (stderr)
        out: Output captured from stdout before the failure
        returncode: Exit code of the process
    """

    def __init__(self, error: str, out: bytes = b"", returncode: Optional[int] = None):
        self.error = error
        self.out = out
        self.returncode = returncode

        parts = [error]
        if returncode is not None:
            parts.append(f"(exit code {returncode})")
        super().__init__(" ".join(parts))
