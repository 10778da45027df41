"""
Diagram source model.

A diagram is one ``@startxxx ... @endxxx`` block. Pages inside the block are
separated by ``newpage`` directives, and each page is rendered by its own engine
process.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

# "@startuml", "@startuml name", "@startmindmap(id=foo)", ...
START_PATTERN = re.compile(r"^\s*@start(\w+)(?:[ \t]+(.+?))?\s*$", re.MULTILINE)
NEWPAGE_PATTERN = re.compile(r"^\s*newpage\b", re.MULTILINE | re.IGNORECASE)

UNTITLED = "untitled"


def count_pages(content: str) -> int:
    """Number of pages in a diagram source (newpage directives + 1)."""
    return len(NEWPAGE_PATTERN.findall(content)) + 1


def find_title(content: str) -> Optional[str]:
    """Name given on the @start line, or None."""
    match = START_PATTERN.search(content)
    if not match or not match.group(2):
        return None
    name = match.group(2).strip()
    # "@startuml(id=foo)" style options are not a name
    if name.startswith("("):
        return None
    return name.strip("\"'") or None


@dataclass(frozen=True)
class Diagram:
    """
    One diagram source unit.

    Attributes:
        content: Diagram source text, sent to the engine on stdin
        page_count: Number of pages (>= 1)
        path: File the diagram was read from, if any
        dir: Directory containing the diagram, used as the first include path
        parent: Resource used to look up per-folder configuration
        title: Display title, used in error messages
    """

    content: str
    page_count: int = 1
    path: Optional[Path] = None
    dir: Optional[Path] = None
    parent: Optional[Path] = None
    title: str = UNTITLED

    def __post_init__(self):
        if self.page_count < 1:
            raise ValueError(f"Diagram must have at least one page, got {self.page_count}")

    @classmethod
    def from_text(
        cls,
        content: str,
        path: Optional[Union[str, Path]] = None,
        parent: Optional[Union[str, Path]] = None,
    ) -> "Diagram":
        """
        Build a diagram from source text, discovering page count and title.

        Args:
            content: Diagram source text
            path: File the text came from (sets dir and the title fallback)
            parent: Resource for configuration lookup (default: path)
        """
        path = Path(path) if path is not None else None
        parent = Path(parent) if parent is not None else path

        title = find_title(content) or (path.stem if path is not None else UNTITLED)

        return cls(
            content=content,
            page_count=count_pages(content),
            path=path,
            dir=path.parent if path is not None else None,
            parent=parent,
            title=title,
        )

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Diagram":
        """Read a diagram file (UTF-8)."""
        path = Path(path).expanduser().resolve()
        if not path.exists():
            raise FileNotFoundError(f"Diagram not found: {path}")
        return cls.from_text(path.read_text(encoding="utf-8"), path=path)
