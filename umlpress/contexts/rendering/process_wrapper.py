"""
Engine output collection.

Reads one engine process to completion and turns its output into a PageOutcome,
either kept in memory or written to the page's destination file.
"""

import asyncio
from pathlib import Path
from typing import Optional

from umlpress.contexts.rendering.exceptions import ProcessOutputError
from umlpress.contexts.rendering.interfaces import PageOutcome


async def collect_output(
    process: asyncio.subprocess.Process, index: int, save_path: Optional[Path] = None
) -> PageOutcome:
    """
    Wait for an engine process to finish and collect what it produced.

    stdout and stderr are read concurrently so neither pipe can fill up and
    stall the engine.

    Args:
        process: Engine process (stdin already written and closed)
        index: Page index the process renders
        save_path: Page destination; None keeps the output in memory

    Returns:
        PageOutcome with ``data`` (memory) or ``path`` (file) set

    Raises:
        ProcessOutputError: If the process exits with a non-zero code. Carries
            stderr text and whatever stdout was captured. Also raised when
            the page file cannot be written.
    """
    stdout, stderr = await asyncio.gather(process.stdout.read(), process.stderr.read())
    returncode = await process.wait()

    if returncode != 0:
        error = stderr.decode("utf-8", errors="replace").strip()
        raise ProcessOutputError(
            error or f"Engine exited with code {returncode}",
            out=stdout,
            returncode=returncode,
        )

    if save_path is None:
        return PageOutcome(index=index, data=stdout)

    save_path = Path(save_path)
    try:
        save_path.parent.mkdir(parents=True, exist_ok=True)
        save_path.write_bytes(stdout)
    except OSError as e:
        raise ProcessOutputError(f"Could not write {save_path}: {e}", out=stdout) from e
    return PageOutcome(index=index, path=save_path)
