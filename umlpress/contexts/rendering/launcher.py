"""
Engine process launcher.

Builds the PlantUML command line for one page and starts the engine right away.
Every page of a diagram gets its own process; all of them are started before any
output is read (see page_chain.py for the ordered draining).
"""

import asyncio
import os
from pathlib import Path
from typing import Awaitable, Callable, List, Optional

from umlpress.contexts.diagram import Diagram
from umlpress.contexts.rendering.interfaces import EngineProcess
from umlpress.contexts.rendering.logger import log_page_launched
from umlpress.utils.config import ConfigProvider

# Pipe modes: export page images, or extract image map data
PIPE_RENDER = "-pipe"
PIPE_MAP = "-pipemap"

SpawnFunc = Callable[..., Awaitable[asyncio.subprocess.Process]]


class ProcessLauncher:
    """
    Starts one engine process per page.

    Args:
        config: Configuration provider queried per diagram resource
        spawn: Process factory with the signature of asyncio.create_subprocess_exec
    """

    def __init__(self, config: ConfigProvider, spawn: SpawnFunc = asyncio.create_subprocess_exec):
        self.config = config
        self.spawn = spawn

    def include_path(self, diagram: Diagram) -> str:
        """
        Value of the plantuml.include.path property for a diagram.

        Joins (with os.pathsep): the diagram's own directory, each configured
        include path, and the diagrams root. The diagram directory is only used
        when absolute; otherwise the value starts with an empty entry.
        """
        include_path = ""
        if diagram.dir is not None and Path(diagram.dir).is_absolute():
            include_path = str(diagram.dir)

        workspace_root = self.config.workspace_root(diagram.parent)
        for folder_path in self.config.include_paths(diagram.parent):
            if not folder_path:
                continue
            folder = Path(folder_path).expanduser()
            if not folder.is_absolute():
                base = workspace_root or diagram.dir or Path.cwd()
                folder = Path(base) / folder
            include_path = include_path + os.pathsep + str(folder)

        diagrams_root = self.config.diagrams_root(diagram.parent)
        if diagrams_root is not None:
            include_path = include_path + os.pathsep + str(diagrams_root)

        return include_path

    def build_args(
        self, diagram: Diagram, index: int, pipe_mode: str, format: Optional[str] = None
    ) -> List[str]:
        """
        Engine arguments (without the java executable) for one page.

        Args:
            diagram: Diagram being rendered
            index: Page index (0-indexed)
            pipe_mode: PIPE_RENDER or PIPE_MAP
            format: Engine output format (full renders only)
        """
        resource = diagram.parent
        args = [
            *self.config.command_args(resource),
            f"-Dplantuml.include.path={self.include_path(diagram)}",
            "-Djava.awt.headless=true",
            "-jar",
            str(self.config.jar(resource)),
            "-pipeimageindex",
            str(index),
            "-charset",
            "utf-8",
            pipe_mode,
        ]
        if format:
            args.append(f"-t{format}")
        if diagram.path is not None:
            args.extend(["-filename", Path(diagram.path).name])
        args.extend(self.config.jar_args(resource))
        return args

    async def launch(
        self,
        diagram: Diagram,
        index: int,
        pipe_mode: str,
        format: Optional[str],
        processes: List[EngineProcess],
    ) -> EngineProcess:
        """
        Start the engine for one page and record its handle in ``processes``.

        Nothing is written to the process here; its stdin stays open until the
        page's turn comes.
        """
        argv = [self.config.java, *self.build_args(diagram, index, pipe_mode, format)]
        process = await self.spawn(
            *argv,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        handle = EngineProcess(process, index)
        processes.append(handle)
        log_page_launched(index, handle.pid, argv)
        return handle
