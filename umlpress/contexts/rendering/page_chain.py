"""
Ordered page draining.

All engine processes of a task are already running when the chain starts. The
chain then visits them strictly by page index: page i+1 gets its input only after
page i's output has been fully consumed, whatever order the processes finish in.
"""

from pathlib import Path
from typing import Callable, List, Optional

from umlpress.contexts.diagram import Diagram
from umlpress.contexts.rendering.exceptions import ProcessOutputError, RenderError
from umlpress.contexts.rendering.format_bridge import FormatBridge
from umlpress.contexts.rendering.interfaces import EngineProcess, PageOutcome, PageResults
from umlpress.contexts.rendering.logger import (
    log_page_failed,
    log_page_result,
    log_task_voided,
)
from umlpress.contexts.rendering.process_wrapper import collect_output
from umlpress.utils.file_index import add_file_index
from umlpress.utils.messages import localize as default_localize


class PageChain:
    """
    Drains the page processes of one render task in page order.

    Args:
        diagram: Diagram being rendered
        processes: Started engine processes, indexed by page
        save_path: Destination of the first page; None keeps output in memory
        bridge: Second-stage converter run after each page, if any
        localize: Message formatter for user-facing errors
        verbose: Log partial engine output of failed pages
    """

    def __init__(
        self,
        diagram: Diagram,
        processes: List[EngineProcess],
        save_path: Optional[Path] = None,
        bridge: Optional[FormatBridge] = None,
        localize: Callable[..., str] = default_localize,
        verbose: bool = False,
    ):
        self.diagram = diagram
        self.processes = processes
        self.save_path = save_path
        self.bridge = bridge
        self.localize = localize
        self.verbose = verbose
        self.results = PageResults()

    def page_path(self, index: int) -> Optional[Path]:
        if self.save_path is None:
            return None
        return add_file_index(self.save_path, index, self.diagram.page_count)

    async def run(self) -> Optional[List[PageOutcome]]:
        """
        Visit every page in order.

        Returns:
            Page outcomes in page order, or None if a page process was killed
            before its turn (results of earlier pages are dropped too)

        Raises:
            RenderError: On the first page that fails; later pages get no input
        """
        for handle in self.processes:
            if handle.killed:
                log_task_voided(self.diagram.title, handle.index)
                self.results.void()
                break

            outcome = await self._render_page(handle)
            self.results.append(outcome)
            log_page_result(handle.index, outcome)

            if self.bridge is not None:
                await self.bridge.convert_page(outcome.path)

        return self.results.outcomes

    async def _render_page(self, handle: EngineProcess) -> PageOutcome:
        await self._write_input(handle)
        try:
            return await collect_output(handle.process, handle.index, self.page_path(handle.index))
        except ProcessOutputError as e:
            log_page_failed(handle.index, e.error, e.out, verbose=self.verbose)
            raise RenderError(self.localize(10, self.diagram.title, e.error), out=e.out) from e

    async def _write_input(self, handle: EngineProcess) -> None:
        stdin = handle.process.stdin
        try:
            if self.diagram.content:
                stdin.write(self.diagram.content.encode("utf-8"))
                await stdin.drain()
        except (BrokenPipeError, ConnectionResetError):
            # Engine exited early; collect_output reports its exit status
            pass
        finally:
            stdin.close()
