"""
Two-stage format conversion.

The engine cannot emit EMF. EMF exports are rendered as SVG first, then each
page's SVG is converted with Inkscape. The converted file is a side effect: it is
not added to the task's page outcomes, and a failed conversion is logged but does
not fail the render task.
"""

import asyncio
from pathlib import Path
from typing import List, Optional

from umlpress.contexts.rendering.formats import engine_format, needs_bridge
from umlpress.contexts.rendering.launcher import SpawnFunc
from umlpress.contexts.rendering.logger import _log_success, _log_warning, log_conversion
from umlpress.utils.file_index import swap_extension


class FormatBridge:
    """
    Converts intermediate page exports into the requested format.

    Args:
        target_format: Format requested by the caller (e.g., "emf")
        converter: Converter executable (Inkscape)
        spawn: Process factory with the signature of asyncio.create_subprocess_exec
    """

    def __init__(
        self,
        target_format: str,
        converter: str,
        spawn: SpawnFunc = asyncio.create_subprocess_exec,
    ):
        self.target_format = target_format
        self.intermediate_format = engine_format(target_format)
        self.converter = converter
        self.spawn = spawn

    @classmethod
    def for_format(
        cls,
        format: Optional[str],
        converter: str,
        spawn: SpawnFunc = asyncio.create_subprocess_exec,
    ) -> Optional["FormatBridge"]:
        """Bridge for a requested format, or None if the engine emits it directly."""
        if not needs_bridge(format):
            return None
        return cls(format, converter, spawn)

    def rewrite_destination(self, save_path: Path) -> Path:
        """Destination of the intermediate export (extension swapped)."""
        return swap_extension(save_path, self.intermediate_format)

    def output_path(self, page_path: Path) -> Path:
        """Final output path for one intermediate page file."""
        return swap_extension(page_path, self.target_format)

    def converter_args(self, input_path: Path, output_path: Path) -> List[str]:
        return [
            "--without-gui",
            f"--export-{self.target_format}={output_path}",
            str(input_path),
        ]

    async def convert_page(self, page_path: Optional[Path]) -> None:
        """
        Convert one page's intermediate file and wait for the converter to exit.

        Args:
            page_path: Intermediate file written by the engine; None for
                in-memory exports, which have nothing to convert
        """
        if page_path is None:
            _log_warning(
                f"{self.target_format.upper()} conversion needs a destination file; "
                f"returning {self.intermediate_format.upper()} data"
            )
            return

        output_path = self.output_path(page_path)
        log_conversion(page_path, output_path)

        try:
            process = await self.spawn(
                self.converter,
                *self.converter_args(page_path, output_path),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            _log_warning(f"Could not start converter {self.converter}: {e}")
            return

        _, stderr = await process.communicate()
        if process.returncode != 0:
            _log_warning(
                f"Converter exited with code {process.returncode} for {page_path}: "
                f"{stderr.decode('utf-8', errors='replace').strip()}"
            )
            return

        _log_success(f"Converted: {output_path}")
