"""
Heuristic Tables

Fixed keyword tables for architecture layer detection and missing-test
detection, keyed by explicit layer and language identifiers.
"""

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Pattern, Tuple


API_LAYER = "API/Controllers"
BUSINESS_LAYER = "Business Logic"
DATA_LAYER = "Data Access"
CONFIG_LAYER = "Configuration"

# Insertion order is the reporting order
ARCHITECTURE_LAYERS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    API_LAYER: ("handlers", "controllers", "routes", "api", "endpoints", "middlewares"),
    BUSINESS_LAYER: ("services", "business", "domain", "core", "logic", "service", "utils"),
    DATA_LAYER: ("repositories", "dao", "dto", "data", "models", "storage", "repository", "database"),
    CONFIG_LAYER: ("config", "env", "settings", "yaml", "configuration"),
})

# Version control, dependency and build artifact directories; hidden ones are skipped too
SKIPPED_DIRECTORIES = frozenset({
    "node_modules", "vendor", "__pycache__", "bin", "build", "dist", "target",
    "venv", "site-packages",
})


@dataclass(frozen=True)
class LanguageProfile:
    """Function declaration and test file conventions of one language."""
    name: str
    extension: str
    function_pattern: Pattern
    test_file_patterns: Tuple[str, ...]


GO = LanguageProfile(
    name="go",
    extension=".go",
    # exported functions and methods
    function_pattern=re.compile(r'func\s+(?:\([^)]*\)\s*)?([A-Z][A-Za-z0-9_]*)\s*[\[(]'),
    test_file_patterns=("*_test.go",),
)

PYTHON = LanguageProfile(
    name="python",
    extension=".py",
    function_pattern=re.compile(r'def\s+([A-Za-z_][A-Za-z0-9_]*)\s*\('),
    test_file_patterns=("test_*.py", "*_test.py"),
)

JAVA = LanguageProfile(
    name="java",
    extension=".java",
    function_pattern=re.compile(
        r'public\s+(?:(?:static|final|synchronized|abstract)\s+)*[A-Za-z_][\w<>\[\],?]*\s+([A-Za-z_]\w*)\s*\('
    ),
    test_file_patterns=("*Test.java",),
)

_JS_FUNCTION_PATTERN = re.compile(
    r'function\s*\*?\s+([A-Za-z_$][\w$]*)\s*\('
    r'|(?:const|let|var)\s+([A-Za-z_$][\w$]*)\s*=\s*(?:async\s+)?(?:function\b|\([^)]*\)\s*=>|[A-Za-z_$][\w$]*\s*=>)'
)

TYPESCRIPT = LanguageProfile(
    name="typescript",
    extension=".ts",
    function_pattern=_JS_FUNCTION_PATTERN,
    test_file_patterns=("*.test.ts", "*.spec.ts"),
)

JAVASCRIPT = LanguageProfile(
    name="javascript",
    extension=".js",
    function_pattern=_JS_FUNCTION_PATTERN,
    test_file_patterns=("*.test.js", "*.spec.js"),
)

# Detection order
LANGUAGES: Tuple[LanguageProfile, ...] = (GO, PYTHON, JAVA, TYPESCRIPT, JAVASCRIPT)

LANGUAGES_BY_NAME: Mapping[str, LanguageProfile] = MappingProxyType({lang.name: lang for lang in LANGUAGES})
