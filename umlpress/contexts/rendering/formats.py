"""
Output format catalog for the local PlantUML engine.

Most formats are emitted by the engine directly. Formats listed in
TWO_STAGE_FORMATS are produced by rendering an intermediate vector format and
converting it with a secondary tool (see format_bridge.py).
"""

from typing import Dict, List, Optional

LOCAL_FORMATS: List[str] = [
    "png",
    "svg",
    "emf",
    "eps",
    "pdf",
    "vdx",
    "xmi",
    "scxml",
    "html",
    "txt",
    "utxt",
    "latex",
    "latex:nopreamble",
]

# Final format -> format requested from the engine
TWO_STAGE_FORMATS: Dict[str, str] = {
    "emf": "svg",
}

# Formats whose file extension differs from the format name
FORMAT_EXTENSIONS: Dict[str, str] = {
    "latex:nopreamble": "latex",
}


def needs_bridge(format: Optional[str]) -> bool:
    """True if the format cannot be emitted by the engine directly."""
    return format in TWO_STAGE_FORMATS


def engine_format(format: str) -> str:
    """Format to request from the engine for a requested output format."""
    return TWO_STAGE_FORMATS.get(format, format)


def file_extension(format: str) -> str:
    """File extension (without dot) used for an output format."""
    return FORMAT_EXTENSIONS.get(format, format)
