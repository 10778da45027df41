"""
Per-page output file naming.

A diagram with several pages exports to one file per page. The destination
path chosen by the caller names the first (or only) page; further pages are
derived from it by inserting a page suffix before the extension.

Examples:
    add_file_index(Path("out/seq.png"), 0, 1)   # out/seq.png
    add_file_index(Path("out/seq.png"), 0, 3)   # out/seq-page1.png
    add_file_index(Path("out/seq.png"), 2, 3)   # out/seq-page3.png
"""

from pathlib import Path
from typing import Union


def add_file_index(file_path: Union[str, Path], index: int, page_count: int) -> Path:
    """
    Derive the output path of one page.

    Args:
        file_path: Destination path chosen for the diagram
        index: Page index (0-indexed)
        page_count: Total number of pages in the diagram

    Returns:
        The path itself for single-page diagrams, otherwise the path with a
        ``-page<n>`` suffix (1-indexed) inserted before the extension.
    """
    file_path = Path(file_path)
    if page_count == 1:
        return file_path
    return file_path.with_name(f"{file_path.stem}-page{index + 1}{file_path.suffix}")


def swap_extension(file_path: Union[str, Path], extension: str) -> Path:
    """Replace the extension of a path (``extension`` given without the dot)."""
    return Path(file_path).with_suffix(f".{extension}")
