"""
Shared utilities for umlpress.

Common functionality used across contexts:
- Configuration management
- Message catalog
- Per-page file naming
- Logging setup
"""

from umlpress.utils.file_index import add_file_index, swap_extension
from umlpress.utils.messages import localize
from umlpress.utils.timestamp import now

__all__ = ["add_file_index", "localize", "now", "swap_extension"]
