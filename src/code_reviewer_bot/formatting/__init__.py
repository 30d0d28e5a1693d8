"""
Comment Formatting

Markdown rendering for advisory comments and review summaries.
"""

from .markdown import (
    NO_STRUCTURE_MESSAGE,
    clean_comment_body,
    format_architecture_comment,
    format_fallback_architecture_advice,
    format_missing_tests_comment,
    format_review_summary,
)

__all__ = [
    'NO_STRUCTURE_MESSAGE',
    'clean_comment_body',
    'format_architecture_comment',
    'format_fallback_architecture_advice',
    'format_missing_tests_comment',
    'format_review_summary',
]
