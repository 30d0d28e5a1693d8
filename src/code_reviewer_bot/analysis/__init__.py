"""
Repository Analysis

Deterministic heuristics run against a repository checkout.
"""

from .architecture import ArchitectureAnalyzer
from .test_coverage import TestCoverageAnalyzer
from .tables import ARCHITECTURE_LAYERS, LANGUAGES, LANGUAGES_BY_NAME, LanguageProfile

__all__ = [
    'ArchitectureAnalyzer',
    'TestCoverageAnalyzer',
    'ARCHITECTURE_LAYERS',
    'LANGUAGES',
    'LANGUAGES_BY_NAME',
    'LanguageProfile',
]
