"""
Unit tests for architecture layer detection.
"""

from unittest.mock import Mock

import pytest

from code_reviewer_bot.analysis.architecture import ArchitectureAnalyzer
from code_reviewer_bot.analysis.tables import (
    API_LAYER, BUSINESS_LAYER, DATA_LAYER, CONFIG_LAYER,
)
from code_reviewer_bot.formatting.markdown import NO_STRUCTURE_MESSAGE
from code_reviewer_bot.llm.oracle import OracleError


def make_dirs(root, *names):
    for name in names:
        (root / name).mkdir(parents=True, exist_ok=True)
    return str(root)


class TestArchitectureAnalyzer:
    """Unit tests for ArchitectureAnalyzer."""

    def test_empty_repository(self, tmp_path):
        """No directories: score 0, one fixed advisory, comment needed."""
        (tmp_path / "main.go").write_text("package main\n")

        review = ArchitectureAnalyzer().analyze(str(tmp_path))

        assert review.score == 0
        assert review.comments == [NO_STRUCTURE_MESSAGE]
        assert review.needs_comment is True

    def test_missing_data_layer(self, tmp_path):
        """handlers/services/config cover three of four layers: score 7."""
        repo = make_dirs(tmp_path, "handlers", "services", "config")

        review = ArchitectureAnalyzer().analyze(repo)

        assert review.missing_layers == [DATA_LAYER]
        assert review.score == 7
        assert review.needs_comment is True
        assert review.found_layers[API_LAYER] == ["handlers"]
        assert review.found_layers[BUSINESS_LAYER] == ["services"]
        assert review.found_layers[CONFIG_LAYER] == ["config"]
        assert len(review.comments) == 1

    def test_healthy_repository_is_quiet(self, tmp_path):
        repo = make_dirs(tmp_path, "api", "services", "models", "config")

        review = ArchitectureAnalyzer().analyze(repo)

        assert review.score == 10
        assert review.missing_layers == []
        assert review.needs_comment is False
        assert review.comments == []

    def test_hidden_and_dependency_directories_are_ignored(self, tmp_path):
        """Directories under .git or node_modules never count."""
        repo = make_dirs(tmp_path, ".git/handlers", "node_modules/controllers", "__pycache__")

        analyzer = ArchitectureAnalyzer()

        assert analyzer.list_directories(repo) == []
        assert analyzer.analyze(repo).score == 0

    def test_nested_directories_and_case_insensitive_match(self, tmp_path):
        repo = make_dirs(tmp_path, "src/UserControllers", "src/Domain", "src/persistence/Repositories")

        analyzer = ArchitectureAnalyzer()
        found = analyzer.categorize(analyzer.list_directories(repo))

        assert found[API_LAYER] == ["UserControllers"]
        assert found[BUSINESS_LAYER] == ["Domain"]
        assert found[DATA_LAYER] == ["Repositories"]
        assert found[CONFIG_LAYER] == []

    @pytest.mark.parametrize("found_count, expected", [(0, 0), (1, 2), (2, 5), (3, 7), (4, 10)])
    def test_score_rounds_down(self, found_count, expected):
        analyzer = ArchitectureAnalyzer()
        layers = list(analyzer.layers)
        found = {layer: (["d"] if i < found_count else []) for i, layer in enumerate(layers)}

        assert analyzer.calculate_score(found) == expected

    def test_oracle_feedback_is_used(self, tmp_path):
        """A well-formed feedback object becomes the advisory comments."""
        repo = make_dirs(tmp_path, "handlers", "services", "config")
        oracle = Mock()
        oracle.generate.return_value = (
            "```json\n"
            '{"comments": [{"body": "Add a repository layer."}, {"body": "Keep handlers thin."}]}\n'
            "```"
        )

        review = ArchitectureAnalyzer(oracle=oracle).analyze(repo)

        assert review.comments == ["Add a repository layer.", "Keep handlers thin."]
        prompt = oracle.generate.call_args[0][0]
        assert "Data Access" in prompt
        assert "7/10" in prompt

    @pytest.mark.parametrize("response", [
        "I cannot help with that.",
        '{"comments": []}',
        '{"comments": [{"text": "wrong key"}]}',
        '{"comments": [{"body": "unterminated"',
    ])
    def test_malformed_feedback_falls_back(self, tmp_path, response):
        repo = make_dirs(tmp_path, "handlers", "services", "config")
        oracle = Mock()
        oracle.generate.return_value = response

        review = ArchitectureAnalyzer(oracle=oracle).analyze(repo)

        assert len(review.comments) == 1
        assert "**Score: 7/10**" in review.comments[0]
        assert "- Data Access" in review.comments[0]

    def test_oracle_failure_falls_back(self, tmp_path):
        repo = make_dirs(tmp_path, "routes")
        oracle = Mock()
        oracle.generate.side_effect = OracleError("upstream timeout")

        review = ArchitectureAnalyzer(oracle=oracle).analyze(repo)

        assert review.score == 2
        assert review.missing_layers == [BUSINESS_LAYER, DATA_LAYER, CONFIG_LAYER]
        assert review.needs_comment is True
        assert "Recommendations" in review.comments[0]

    def test_summary_marks_missing_layers(self, tmp_path):
        repo = make_dirs(tmp_path, "handlers")
        analyzer = ArchitectureAnalyzer()
        directories = analyzer.list_directories(repo)

        summary = analyzer.summarize(directories, analyzer.categorize(directories))

        assert "Total directories: 1" in summary
        assert f"- {DATA_LAYER}: MISSING" in summary
        assert f"- {API_LAYER}: handlers" in summary
