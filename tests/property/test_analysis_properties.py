"""
Property-based tests for the repository heuristics.

Property: architecture scores stay within 0..10 and a function is reported
as untested exactly when no test reference to it exists.
"""

import tempfile
from pathlib import Path

from hypothesis import given, settings, strategies as st

from code_reviewer_bot.analysis.architecture import ArchitectureAnalyzer
from code_reviewer_bot.analysis.test_coverage import TestCoverageAnalyzer


directory_names = st.lists(
    st.text(alphabet='abcdefghijklmnopqrstuvwxyz_', min_size=1, max_size=14),
    max_size=12,
    unique=True,
)

function_names = st.lists(
    # Equal lengths so no name's test reference contains another's
    st.text(alphabet='abcdefghijklmnopqrstuvwxyz', min_size=6, max_size=6)
    .map(lambda s: s.capitalize())
    .filter(lambda s: 'Test' not in s),
    min_size=1,
    max_size=6,
    unique=True,
)


class TestArchitectureProperties:
    """Property tests for ArchitectureAnalyzer."""

    @given(names=directory_names)
    def test_score_bounds(self, names):
        """
        Property: the score is an integer in [0, 10] and at most four
        layers are found.
        """
        analyzer = ArchitectureAnalyzer()
        found = analyzer.categorize(names)

        score = analyzer.calculate_score(found)
        detected = [layer for layer, dirs in found.items() if dirs]

        assert isinstance(score, int)
        assert 0 <= score <= 10
        assert len(detected) <= 4
        assert set(analyzer.find_missing_layers(found)) | set(detected) == set(analyzer.layers)

    @settings(max_examples=30, deadline=None)
    @given(names=directory_names)
    def test_analysis_on_disk_never_fails(self, names):
        """
        Property: analysis of any directory layout returns a review, and a
        comment is requested whenever the layout is incomplete.
        """
        with tempfile.TemporaryDirectory() as root:
            for name in names:
                (Path(root) / name).mkdir()

            review = ArchitectureAnalyzer().analyze(root)

        assert 0 <= review.score <= 10
        if review.missing_layers:
            assert review.needs_comment
            assert len(review.comments) == 1


class TestCoverageProperties:
    """Property tests for TestCoverageAnalyzer."""

    @settings(max_examples=30, deadline=None)
    @given(
        names=function_names,
        in_diff=st.sets(st.integers(min_value=0, max_value=5)),
        on_disk=st.sets(st.integers(min_value=0, max_value=5)),
        suffix_form=st.booleans(),
    )
    def test_missing_iff_no_test_reference(self, names, in_diff, on_disk, suffix_form):
        """
        Property: a function is missing a test exactly when neither the diff
        nor an on-disk test file mentions Test<name> or <name>Test.
        """
        def reference(name):
            return f"{name}Test" if suffix_form else f"Test{name}"

        diff_lines = [
            "diff --git a/pkg/impl.go b/pkg/impl.go",
            "--- a/pkg/impl.go",
            "+++ b/pkg/impl.go",
            f"@@ -1 +1,{len(names)} @@",
        ]
        diff_lines += [f"+func {name}() {{}}" for name in names]
        diff_lines += [f" // see {reference(names[i])}" for i in sorted(in_diff) if i < len(names)]
        diff_text = '\n'.join(diff_lines) + '\n'

        with tempfile.TemporaryDirectory() as root:
            disk_refs = [reference(names[i]) for i in sorted(on_disk) if i < len(names)]
            (Path(root) / "impl_test.go").write_text('\n'.join(f"// {ref}" for ref in disk_refs))

            review = TestCoverageAnalyzer().analyze(diff_text, root)

        expected = [
            name for i, name in enumerate(names)
            if i not in in_diff and i not in on_disk
        ]
        assert review.missing_functions == expected
        assert review.has_missing == bool(expected)
        assert len(review.comments) == (1 if expected else 0)
