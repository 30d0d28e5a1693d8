"""
Markdown Comment Formatter

Renders advisory comments and review summaries as Markdown for
pull request conversations.
"""

import re
from typing import List, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from ..models.analysis import ArchitectureReview
    from ..models.review import AnchoredComment


NO_STRUCTURE_MESSAGE = (
    "⚠️ **Architecture Review**\n\n"
    "No clear project structure detected. Consider organizing code into proper architectural layers:\n"
    "- API/Controllers layer\n"
    "- Business Logic layer\n"
    "- Data Access layer\n"
    "- Configuration layer"
)

_CODE_FENCE_PATTERN = re.compile(r'```[A-Za-z]*')


def clean_comment_body(body: str) -> str:
    """
    Normalize an LLM-written comment body for display.

    Expands escaped newlines, strips code fences and wrapping quotes,
    and drops blank lines.
    """
    cleaned = body.replace('\\n', '\n')
    cleaned = _CODE_FENCE_PATTERN.sub('', cleaned)
    cleaned = cleaned.strip().strip('"')

    lines = [line.strip() for line in cleaned.split('\n')]
    return '\n'.join(line for line in lines if line)


def format_architecture_comment(review: "ArchitectureReview") -> str:
    """Render an architecture review as a single advisory comment."""
    parts = [
        "### 🧱 **Project Architecture Review**\n",
        f"**Score:** `{review.score}/10`\n",
        "#### 📦 Detected Layers",
        "| Layer | Directories |\n|-------|-------------|",
    ]
    for layer in review.detected_layers:
        count = len(review.found_layers[layer])
        parts.append(f"| {layer} | {count} director{'y' if count == 1 else 'ies'} |")
    parts.append("")

    if review.missing_layers:
        parts.append("#### ❌ Missing Layers")
        parts.extend(f"- [ ] {layer}" for layer in review.missing_layers)
        parts.append("")

    if review.comments:
        parts.append("<details>\n<summary>📝 Detailed Comments</summary>\n")
        for i, comment in enumerate(review.comments, start=1):
            parts.append(f"**{i}.** {clean_comment_body(comment)}\n")
        parts.append("</details>")

    return '\n'.join(parts)


def format_fallback_architecture_advice(score: int, missing_layers: Sequence[str]) -> str:
    """Deterministic architecture advice used when the LLM is unavailable."""
    body = f"## 🏗️ Architecture Review\n\n**Score: {score}/10**\n\n"

    if missing_layers:
        body += "**Missing architectural layers:**\n"
        for layer in missing_layers:
            body += f"- {layer}\n"
        body += "\n"

    body += "**Recommendations:**\n"
    body += "- Consider implementing proper separation of concerns\n"
    body += "- Organize code into clear architectural layers\n"
    body += "- Follow modular design principles for better maintainability"
    return body


def format_missing_tests_comment(function_names: Sequence[str]) -> str:
    """One aggregated advisory listing every function without tests."""
    body = "## 🧪 Missing Unit Tests\n\n"
    body += "The following functions are missing unit tests:\n\n"

    for name in function_names:
        body += f"- `{name}()`\n"

    body += "\n**Why unit tests are important:**\n"
    body += "- Prevent regressions when code changes\n"
    body += "- Document expected behavior\n"
    body += "- Improve code maintainability\n"
    body += "- Catch bugs early in development\n\n"
    body += "Please add unit tests for these functions to maintain code quality."
    return body


def format_review_summary(comments: List["AnchoredComment"]) -> str:
    """Render anchored comments as one summary, for servers without batched reviews."""
    lines = ["### AI Code Review Summary\n"]
    for c in comments:
        lines.append(f"- **File `{c.file_path}` (line {c.file_line}, position {c.hunk_position}):** {c.body}")
    return '\n'.join(lines) + '\n'
