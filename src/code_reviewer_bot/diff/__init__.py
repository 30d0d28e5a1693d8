"""
Diff Processing Layer

Unified diff parsing and line anchoring for review comments.
"""

from .parser import DiffParser, split_diff_lines
from .locator import LineLocator, LineLocationError

__all__ = ['DiffParser', 'split_diff_lines', 'LineLocator', 'LineLocationError']
