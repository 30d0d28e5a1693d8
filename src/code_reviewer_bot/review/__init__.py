"""
Review Pipeline

Per pull request orchestration and background dispatch.
"""

from .orchestrator import ReviewOrchestrator, ReviewAbortedError
from .dispatcher import ReviewDispatcher, DeadLetter

__all__ = [
    'ReviewOrchestrator',
    'ReviewAbortedError',
    'ReviewDispatcher',
    'DeadLetter',
]
