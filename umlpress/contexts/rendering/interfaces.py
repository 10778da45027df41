"""
Renderer interface and render task models.

A render task is returned as soon as every page's engine process has been
started. The task exposes those process handles so callers can cancel work,
and an outcome future that settles once all pages have been consumed in order.
"""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Protocol, runtime_checkable

from umlpress.contexts.diagram import Diagram


class EngineProcess:
    """
    Handle on one page's engine process.

    The render task owns the process streams. Callers holding the handle may only
    request termination through ``kill()`` or ``terminate()``.

    Attributes:
        index: Page index rendered by this process
        process: The underlying asyncio subprocess
        killed: True once a termination signal was delivered
    """

    def __init__(self, process: asyncio.subprocess.Process, index: int):
        self.process = process
        self.index = index
        self.killed = False

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def returncode(self) -> Optional[int]:
        return self.process.returncode

    def kill(self) -> bool:
        """Send SIGKILL. Returns False if the process had already exited."""
        return self._signal(self.process.kill)

    def terminate(self) -> bool:
        """Send SIGTERM. Returns False if the process had already exited."""
        return self._signal(self.process.terminate)

    def _signal(self, send) -> bool:
        try:
            send()
        except ProcessLookupError:
            return False
        self.killed = True
        return True

    def __repr__(self) -> str:
        return f"EngineProcess(index={self.index}, pid={self.pid}, killed={self.killed})"


@dataclass
class PageOutcome:
    """
    Result of one rendered page.

    Exactly one of ``data`` (in-memory export) or ``path`` (export written to
    disk, no bytes kept) is set.
    """

    index: int
    data: Optional[bytes] = None
    path: Optional[Path] = None

    @property
    def written(self) -> bool:
        return self.path is not None


class PageResults:
    """
    Ordered page outcomes of one render task.

    Append-only, in page order. A task cancelled by killing a page process is
    voided: the whole list is dropped (``outcomes`` becomes None), including pages
    that had already completed.
    """

    def __init__(self):
        self.outcomes: Optional[List[PageOutcome]] = []

    @property
    def voided(self) -> bool:
        return self.outcomes is None

    def append(self, outcome: PageOutcome) -> None:
        if self.outcomes is None:
            raise RuntimeError("Cannot add page outcomes to a voided render task")
        self.outcomes.append(outcome)

    def void(self) -> None:
        self.outcomes = None


@dataclass
class RenderTask:
    """
    A running export of one diagram.

    Attributes:
        outcome: Settles with the ordered page outcomes (None when voided by a
            kill), or raises RenderError / ConfigurationError
        processes: Every engine process started for this task, one per page

    Preflight and launch failures produce an outcome that is already rejected.
    Await result() (or retrieve outcome.exception()) even when dropping the task,
    otherwise asyncio reports the exception as never retrieved.
    """

    outcome: "asyncio.Future[Optional[List[PageOutcome]]]"
    processes: List[EngineProcess] = field(default_factory=list)

    async def result(self) -> Optional[List[PageOutcome]]:
        """Wait for the task to settle and return its page outcomes."""
        return await self.outcome

    def done(self) -> bool:
        return self.outcome.done()


@runtime_checkable
class Renderer(Protocol):
    """A rendering backend able to export diagrams page by page."""

    def formats(self) -> List[str]: ...

    def limit_concurrency(self) -> bool: ...

    async def render(
        self, diagram: Diagram, format: str, save_path: Optional[Path] = None
    ) -> RenderTask: ...

    async def get_map_data(
        self, diagram: Diagram, save_path: Optional[Path] = None
    ) -> RenderTask: ...
