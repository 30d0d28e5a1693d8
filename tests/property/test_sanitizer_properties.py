"""
Property-based tests for LLM response sanitizing.

Property: sanitizing is a no-op on clean JSON arrays, repeated sanitizing
changes nothing, and text without an array span means no findings.
"""

import json

from hypothesis import given, strategies as st

from code_reviewer_bot.llm.sanitizer import ResponseSanitizer


plain_text = st.text(
    alphabet=st.characters(whitelist_categories=('Lu', 'Ll', 'Nd'), whitelist_characters=' .+_'),
    min_size=1,
    max_size=40,
)

findings = st.lists(
    st.fixed_dictionaries({'line_content': plain_text, 'message': plain_text}),
    max_size=8,
)


class TestSanitizerProperties:
    """Property tests for ResponseSanitizer."""

    @given(items=findings, compact=st.booleans())
    def test_clean_array_is_unchanged(self, items, compact):
        """
        Property: already-clean JSON array text passes through untouched.
        """
        sanitizer = ResponseSanitizer()
        text = json.dumps(items, separators=(',', ':') if compact else None)

        assert sanitizer.sanitize(text) == text

    @given(text=st.text(max_size=200))
    def test_sanitize_is_idempotent(self, text):
        """
        Property: sanitize(sanitize(x)) == sanitize(x) for any text.
        """
        sanitizer = ResponseSanitizer()
        once = sanitizer.sanitize(text)

        assert sanitizer.sanitize(once) == once

    @given(text=st.text(alphabet=st.characters(blacklist_characters='[]'), max_size=200))
    def test_no_array_span_yields_empty_string(self, text):
        """
        Property: text without '[' ... ']' sanitizes to ''.
        """
        assert ResponseSanitizer().sanitize(text) == ""

    @given(items=findings, prefix=plain_text, suffix=plain_text)
    def test_wrapped_array_with_trailing_comma_parses(self, items, prefix, suffix):
        """
        Property: prose around the array and a trailing comma do not
        prevent a strict parse of the original findings.
        """
        sanitizer = ResponseSanitizer()
        body = json.dumps(items)
        if items:
            body = body[:-1] + ",]"
        text = f"{prefix}\n```json\n{body}\n```\n{suffix}"

        assert json.loads(sanitizer.sanitize(text)) == items
