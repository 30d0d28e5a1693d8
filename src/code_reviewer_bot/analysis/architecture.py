"""
Architecture Analyzer

Scores a repository checkout by how many conventional architecture
layers its directory names cover, and produces advisory feedback.
"""

import os
import re
import json
import logging
from typing import Dict, List, Mapping, Optional, Tuple

from ..models.analysis import ArchitectureReview
from ..models.review import ArchitectureFeedback
from ..llm.oracle import Oracle
from ..llm.prompts import PromptBuilder
from ..formatting.markdown import NO_STRUCTURE_MESSAGE, format_fallback_architecture_advice
from .tables import ARCHITECTURE_LAYERS, SKIPPED_DIRECTORIES


logger = logging.getLogger(__name__)


class ArchitectureAnalyzer:
    """
    Detects architecture layers from directory names.

    Each directory name is matched case-insensitively, by substring,
    against the keyword set of every layer. Healthy repositories (score
    of 8 or more with no missing layer) produce no comment. Otherwise the
    LLM is asked for advice, with a templated comment as the fallback.
    """

    def __init__(
        self,
        oracle: Optional[Oracle] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        layers: Mapping[str, Tuple[str, ...]] = ARCHITECTURE_LAYERS
    ):
        """
        Initialize architecture analyzer.

        Args:
            oracle: LLM used for natural-language feedback (fallback only if None)
            prompt_builder: Renders the architecture prompt
            layers: Layer name -> directory keywords
        """
        self.oracle = oracle
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.layers = layers
        self.code_fence_pattern = re.compile(r'```[A-Za-z]*')

    def analyze(self, repo_path: str) -> ArchitectureReview:
        """
        Analyze the directory structure of a repository checkout.

        Args:
            repo_path: Local repository root

        Returns:
            ArchitectureReview with score, layers and advisory comments
        """
        logger.info(f"Analyzing project architecture at {repo_path}")

        directories = self.list_directories(repo_path)
        if not directories:
            return ArchitectureReview(
                score=0,
                comments=[NO_STRUCTURE_MESSAGE],
                needs_comment=True,
                summary="No meaningful directory structure found.",
            )

        found_layers = self.categorize(directories)
        missing_layers = self.find_missing_layers(found_layers)
        score = self.calculate_score(found_layers)
        summary = self.summarize(directories, found_layers)

        logger.info(f"Architecture score {score}/10, missing layers: {missing_layers or 'none'}")

        if score >= 8 and not missing_layers:
            return ArchitectureReview(
                score=score,
                found_layers=found_layers,
                missing_layers=missing_layers,
                needs_comment=False,
                summary=summary,
            )

        return ArchitectureReview(
            score=score,
            found_layers=found_layers,
            missing_layers=missing_layers,
            comments=self._generate_comments(summary, score, missing_layers),
            needs_comment=True,
            summary=summary,
        )

    def list_directories(self, repo_path: str) -> List[str]:
        """Names of every directory below the root, skipping hidden and artifact dirs."""
        directories = []

        for _, dirnames, _ in os.walk(repo_path):
            # Prune in place so os.walk does not descend
            dirnames[:] = sorted(
                d for d in dirnames
                if not d.startswith('.') and d.lower() not in SKIPPED_DIRECTORIES
            )
            directories.extend(dirnames)

        return directories

    def categorize(self, directories: List[str]) -> Dict[str, List[str]]:
        """Map each layer to the directory names matching its keywords."""
        found: Dict[str, List[str]] = {}

        for layer, keywords in self.layers.items():
            found[layer] = [
                d for d in directories
                if any(keyword in d.lower() for keyword in keywords)
            ]

        return found

    def find_missing_layers(self, found_layers: Dict[str, List[str]]) -> List[str]:
        return [layer for layer, dirs in found_layers.items() if not dirs]

    def calculate_score(self, found_layers: Dict[str, List[str]]) -> int:
        """(found layers / total layers) * 10, rounded down."""
        found_count = sum(1 for dirs in found_layers.values() if dirs)
        return (found_count * 10) // len(self.layers)

    def summarize(self, directories: List[str], found_layers: Dict[str, List[str]]) -> str:
        lines = [
            f"Total directories: {len(directories)}",
            f"All directories: {', '.join(directories)}",
            "",
            "Architecture layers found:",
        ]
        for layer, dirs in found_layers.items():
            lines.append(f"- {layer}: {', '.join(dirs) if dirs else 'MISSING'}")
        return '\n'.join(lines) + '\n'

    def _generate_comments(self, summary: str, score: int, missing_layers: List[str]) -> List[str]:
        """Ask the LLM for advice; any failure yields the templated fallback."""
        if self.oracle is None:
            return [format_fallback_architecture_advice(score, missing_layers)]

        try:
            prompt = self.prompt_builder.build_architecture_prompt(summary, score, missing_layers)
            response = self.oracle.generate(prompt)
            return self.parse_feedback(response)
        except Exception as e:
            logger.warning(f"Architecture feedback unavailable, using fallback comment: {e}")
            return [format_fallback_architecture_advice(score, missing_layers)]

    def parse_feedback(self, response: str) -> List[str]:
        """
        Parse a {"comments": [{"body": ...}]} object from LLM output.

        Raises:
            ValueError: If no well-formed feedback object is present
        """
        text = self.code_fence_pattern.sub('', response or '')
        start_index = text.find('{')
        end_index = text.rfind('}')
        if start_index == -1 or end_index < start_index:
            raise ValueError("No JSON object in architecture feedback")

        data = json.loads(text[start_index:end_index + 1])
        feedback = ArchitectureFeedback.model_validate(data)
        return [comment.body for comment in feedback.comments]
