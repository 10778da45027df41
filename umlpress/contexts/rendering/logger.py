"""
Rendering context logger.

Provides logging interface for rendering context with automatic [render] prefix.
All rendering modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path
from typing import Optional, Sequence

from loguru import logger

from umlpress.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[render]"


def setup_rendering_logger(log_dir: Path, java: Optional[str] = None, verbose: bool = False) -> Path:
    """
    Setup logger for rendering context.

    Args:
        log_dir: Directory for this rendering session
        java: Java executable used for the session (logged as provenance)
        verbose: Show debug messages on the console

    Returns:
        Path to log file
    """
    return _setup_logger(
        context_name="render",
        log_dir=log_dir,
        extra_provenance={"Java": java or "(not configured)"},
        console_level="DEBUG" if verbose else "INFO",
    )


# Wrapper functions with automatic [render] prefix


def _log_info(message: str) -> None:
    """Log info message with [render] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [render] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [render] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [render] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [render] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level rendering-specific logging helpers


def log_task_start(
    title: str, page_count: int, format: Optional[str], save_path: Optional[Path]
) -> None:
    """Log start of a render task with context."""
    _log_info(f"Rendering: {title} ({page_count} page{'s' if page_count != 1 else ''})")
    _log_debug(f"  Format: {format or 'map data'}")
    _log_debug(f"  Destination: {save_path or 'memory'}")


def log_page_launched(index: int, pid: int, argv: Sequence[str]) -> None:
    _log_debug(f"Page {index}: engine started (pid {pid})")
    _log_debug(f"  Command: {' '.join(argv)}")


def log_page_result(index: int, outcome) -> None:
    """Log one completed page (PageOutcome)."""
    if outcome.written:
        _log_info(f"Page {index}: written to {outcome.path}")
    else:
        _log_info(f"Page {index}: {len(outcome.data or b'')} bytes")


def log_page_failed(index: int, error: str, out: bytes, verbose: bool = False) -> None:
    _log_error(f"Page {index}: render failed")
    for line in error.splitlines()[:10]:
        _log_error(f"  {line}")
    if verbose and out:
        logger.opt(raw=True).debug(
            f"\n{'=' * 80}\nENGINE STDOUT ({len(out)} bytes):\n{'=' * 80}\n"
            f"{out.decode('utf-8', errors='replace')}\n"
        )


def log_task_voided(title: str, index: int) -> None:
    _log_warning(f"{title}: page {index} engine was killed, discarding results")


def log_conversion(input_path: Path, output_path: Path) -> None:
    _log_info(f"Converting: input={input_path}, output={output_path}")
