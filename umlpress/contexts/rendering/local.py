"""
Local PlantUML renderer.

Exports diagrams with a locally installed Java runtime and PlantUML jar. A task
runs in two phases:
1. Launch: one engine process per page, all started up front
2. Drain: a single PageChain consumes the processes in page order

Configuration problems (no Java, no jar) are reported through the task outcome
before any process starts.
"""

import asyncio
from pathlib import Path
from typing import Callable, List, Optional, Union

from umlpress.contexts.diagram import Diagram
from umlpress.contexts.rendering.exceptions import ConfigurationError, RenderError
from umlpress.contexts.rendering.format_bridge import FormatBridge
from umlpress.contexts.rendering.formats import LOCAL_FORMATS, engine_format
from umlpress.contexts.rendering.interfaces import EngineProcess, RenderTask
from umlpress.contexts.rendering.launcher import (
    PIPE_MAP,
    PIPE_RENDER,
    ProcessLauncher,
    SpawnFunc,
)
from umlpress.contexts.rendering.logger import _log_error, log_task_start
from umlpress.contexts.rendering.page_chain import PageChain
from umlpress.utils.config import ConfigProvider
from umlpress.utils.messages import localize as default_localize


class LocalRenderer:
    """
    Renderer backed by a local PlantUML jar.

    Args:
        config: Configuration provider (default: settings from the environment)
        spawn: Process factory with the signature of asyncio.create_subprocess_exec
        localize: Message formatter for user-facing errors
        verbose: Log partial engine output of failed pages

    Example:
        >>> renderer = LocalRenderer()
        >>> task = await renderer.render(Diagram.from_file("seq.puml"), "png", Path("out/seq.png"))
        >>> outcomes = await task.result()
    """

    def __init__(
        self,
        config: Optional[ConfigProvider] = None,
        spawn: SpawnFunc = asyncio.create_subprocess_exec,
        localize: Callable[..., str] = default_localize,
        verbose: bool = False,
    ):
        self.config = config if config is not None else ConfigProvider()
        self.spawn = spawn
        self.localize = localize
        self.verbose = verbose
        self.launcher = ProcessLauncher(self.config, spawn)

    def limit_concurrency(self) -> bool:
        """Each page starts a JVM, so callers should not run many tasks at once."""
        return True

    def formats(self) -> List[str]:
        return list(LOCAL_FORMATS)

    async def render(
        self, diagram: Diagram, format: str, save_path: Optional[Union[str, Path]] = None
    ) -> RenderTask:
        """
        Export every page of a diagram.

        Args:
            diagram: Diagram to export
            format: Output format, one of formats()
            save_path: Destination file; None returns page bytes in memory

        Returns:
            RenderTask with all page processes already started

        Raises:
            ValueError: If the format is not supported
        """
        if format not in LOCAL_FORMATS:
            raise ValueError(
                f"Unsupported format '{format}'. Supported: {', '.join(LOCAL_FORMATS)}"
            )
        return await self._create_task(diagram, PIPE_RENDER, save_path, format)

    async def get_map_data(
        self, diagram: Diagram, save_path: Optional[Union[str, Path]] = None
    ) -> RenderTask:
        """Extract image map data (cmapx) for every page of a diagram."""
        return await self._create_task(diagram, PIPE_MAP, save_path)

    def preflight(self, diagram: Diagram) -> None:
        """
        Check that the engine can run for this diagram.

        Raises:
            ConfigurationError: If Java is not configured or the jar does not exist
        """
        if not self.config.java:
            raise ConfigurationError(self.localize(5))

        if not self.config.jar(diagram.parent).exists():
            install_location = self.config.install_location
            raise ConfigurationError(
                self.localize(6, install_location), install_location=install_location
            )

    async def _create_task(
        self,
        diagram: Diagram,
        pipe_mode: str,
        save_path: Optional[Union[str, Path]] = None,
        format: Optional[str] = None,
    ) -> RenderTask:
        loop = asyncio.get_running_loop()
        save_path = Path(save_path) if save_path else None

        try:
            self.preflight(diagram)
        except ConfigurationError as e:
            _log_error(e.message)
            outcome = loop.create_future()
            outcome.set_exception(e)
            return RenderTask(outcome=outcome)

        log_task_start(diagram.title, diagram.page_count, format, save_path)

        bridge = FormatBridge.for_format(format, self.config.converter, self.spawn)
        if bridge is not None and save_path is not None:
            save_path = bridge.rewrite_destination(save_path)

        processes: List[EngineProcess] = []
        engine_fmt = engine_format(format) if format else None
        try:
            for index in range(diagram.page_count):
                await self.launcher.launch(diagram, index, pipe_mode, engine_fmt, processes)
        except OSError as e:
            # Processes started for earlier pages stay in the task for the caller to kill
            _log_error(f"Could not start engine {self.config.java}: {e}")
            outcome = loop.create_future()
            outcome.set_exception(RenderError(self.localize(10, diagram.title, str(e))))
            return RenderTask(outcome=outcome, processes=processes)

        chain = PageChain(
            diagram,
            processes,
            save_path=save_path,
            bridge=bridge,
            localize=self.localize,
            verbose=self.verbose,
        )
        return RenderTask(outcome=asyncio.ensure_future(chain.run()), processes=processes)
