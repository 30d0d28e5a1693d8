"""
Prompt Builder

Renders the per-chunk review prompt and the architecture feedback prompt
from configurable templates.
"""

import logging
from string import Template
from typing import List, Optional


logger = logging.getLogger(__name__)


DEFAULT_REVIEW_PROMPT = """You are an experienced senior engineer reviewing a pull request.
Review the following diff hunk from the file `$file_path`.

Focus on bugs, security problems, performance issues and unclear code in the
ADDED lines only (lines starting with '+'). Ignore style nitpicks.

Respond with a JSON array and nothing else. Each element must have:
  - "line_content": the exact added line you are commenting on, including its leading '+'
  - "message": a concise, actionable review comment in Markdown

If there is nothing worth commenting on, respond with an empty array: []

Diff hunk:
```diff
$code_snippet
```
"""

DEFAULT_ARCHITECTURE_PROMPT = """You are a software architect reviewing the directory structure of a repository.

Structure summary:
$summary

Architecture score: $score/10
Missing layers: $missing_layers

Give short, practical advice on how the project could be organised into clear
architectural layers. Respond with a JSON object and nothing else, in the form:
{"comments": [{"body": "<markdown advice>"}]}
"""


class PromptBuilder:
    """
    Builds prompts for LLM review generation.

    Templates use '$name' placeholders so that literal JSON braces in the
    instructions need no escaping.
    """

    def __init__(
        self,
        review_template: Optional[str] = None,
        architecture_template: Optional[str] = None
    ):
        """
        Initialize prompt builder.

        Args:
            review_template: Per-chunk template ($file_path, $code_snippet)
            architecture_template: Architecture template ($summary, $score, $missing_layers)
        """
        self.review_template = Template(review_template or DEFAULT_REVIEW_PROMPT)
        self.architecture_template = Template(architecture_template or DEFAULT_ARCHITECTURE_PROMPT)

    def build_review_prompt(self, file_path: str, code_snippet: str) -> str:
        """
        Build the review prompt for a single diff chunk.

        Args:
            file_path: Path of the changed file
            code_snippet: Full hunk text

        Returns:
            Complete prompt string

        Raises:
            ValueError: If the template contains an unknown placeholder
        """
        logger.debug(f"Building review prompt for {file_path}")
        try:
            return self.review_template.substitute(file_path=file_path, code_snippet=code_snippet)
        except (KeyError, ValueError) as e:
            raise ValueError(f"Invalid review prompt template: {e}")

    def build_architecture_prompt(self, summary: str, score: int, missing_layers: List[str]) -> str:
        """Build the architecture feedback prompt."""
        missing = ", ".join(missing_layers) if missing_layers else "None"
        try:
            return self.architecture_template.substitute(
                summary=summary,
                score=score,
                missing_layers=missing,
            )
        except (KeyError, ValueError) as e:
            raise ValueError(f"Invalid architecture prompt template: {e}")
