"""
Analysis Data Models

저장소 구조 및 테스트 분석 결과 모델들
"""

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class ArchitectureReview:
    """Layer detection result for a repository checkout."""
    score: int
    found_layers: Dict[str, List[str]] = field(default_factory=dict)
    missing_layers: List[str] = field(default_factory=list)
    comments: List[str] = field(default_factory=list)
    needs_comment: bool = False
    summary: str = ""

    def __post_init__(self):
        """데이터 검증"""
        if not 0 <= self.score <= 10:
            raise ValueError(f"Score must be between 0 and 10: {self.score}")

    @property
    def detected_layers(self) -> List[str]:
        """Layers with at least one matching directory."""
        return [layer for layer, dirs in self.found_layers.items() if dirs]


@dataclass
class TestCoverageReview:
    """Newly declared functions without a corresponding unit test."""
    __test__ = False  # not a pytest class

    missing_functions: List[str] = field(default_factory=list)
    comments: List[str] = field(default_factory=list)
    languages: List[str] = field(default_factory=list)

    @property
    def has_missing(self) -> bool:
        return bool(self.missing_functions)
