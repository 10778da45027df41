"""
Rendering Context

Responsibilities:
- Starts one PlantUML engine process per diagram page
- Consumes page outputs strictly in page order
- Writes page exports to disk or returns them in memory
- Converts intermediate exports for formats the engine cannot emit (EMF)
- Reports configuration problems before any process starts

Owns: Engine invocation, render tasks, page artifacts
Never: Parses diagram syntax or cancels processes on the caller's behalf
"""

from umlpress.contexts.rendering.exceptions import (
    ConfigurationError,
    ProcessOutputError,
    RenderError,
)
from umlpress.contexts.rendering.interfaces import (
    EngineProcess,
    PageOutcome,
    Renderer,
    RenderTask,
)
from umlpress.contexts.rendering.local import LocalRenderer

__all__ = [
    "ConfigurationError",
    "EngineProcess",
    "LocalRenderer",
    "PageOutcome",
    "ProcessOutputError",
    "RenderError",
    "RenderTask",
    "Renderer",
]
