"""
Response Sanitizer

Best-effort recovery of the JSON array embedded in raw LLM output.
"""

import re
import json
import logging
from typing import List

from pydantic import ValidationError

from ..models.review import CandidateComment, CandidateCommentPayload


logger = logging.getLogger(__name__)


class ResponseSanitizer:
    """
    Extracts and repairs the JSON array of findings in an LLM response.

    LLM output often wraps the array in prose or code fences, embeds raw
    newlines inside string values, or leaves a trailing comma before a
    closing bracket. Anything still malformed after sanitizing is left
    for the strict parse to reject. Array elements are validated one by
    one, so a single malformed finding is dropped on its own.
    """

    def __init__(self):
        """Initialize response sanitizer."""
        self.trailing_comma_pattern = re.compile(r',(\s*[\}\]])')
        self.control_char_table = str.maketrans({'\n': ' ', '\t': ' ', '\r': ' '})

    def sanitize(self, text: str) -> str:
        """
        Slice out the outermost '[...]' span and repair common defects.

        Args:
            text: Raw LLM response

        Returns:
            Sanitized JSON array text, or '' when no array span exists
        """
        if not text:
            return ''

        start_index = text.find('[')
        end_index = text.rfind(']')
        if start_index == -1 or end_index == -1 or end_index < start_index:
            return ''

        sanitized = text[start_index:end_index + 1].translate(self.control_char_table)

        previous = None
        while previous != sanitized:
            previous = sanitized
            sanitized = self.trailing_comma_pattern.sub(r'\1', sanitized)

        return sanitized

    def parse_candidates(self, text: str) -> List[CandidateComment]:
        """
        Sanitize and strictly parse an LLM response into candidate comments.

        Args:
            text: Raw LLM response

        Returns:
            List of valid CandidateComments, in array order (empty when the
            response has no array)

        Raises:
            json.JSONDecodeError: If the sanitized text is not valid JSON
            ValueError: If the sanitized JSON is not an array
        """
        sanitized = self.sanitize(text)
        if not sanitized:
            logger.debug("No JSON array in LLM response, treating as no findings")
            return []

        data = json.loads(sanitized)
        if not isinstance(data, list):
            raise ValueError(f"Expected a JSON array of findings, got {type(data).__name__}")

        candidates = []
        for index, item in enumerate(data):
            try:
                payload = CandidateCommentPayload.model_validate(item)
            except ValidationError as e:
                logger.warning(f"Skipping malformed finding #{index}: {e.error_count()} validation errors")
                continue
            candidates.append(payload.to_candidate())

        return candidates
