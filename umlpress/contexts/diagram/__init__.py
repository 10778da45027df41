"""
Diagram Context

Responsibilities:
- Represents one diagram source unit read from disk or given inline
- Discovers page count and title from the source

Owns: Diagram source model
Never: Parses diagram syntax beyond page and title directives
"""

from umlpress.contexts.diagram.diagram import Diagram

__all__ = ["Diagram"]
