"""
Rendering of call history for prompts.
"""

from typing import Iterable

from ..models import CallRecord

TRUNCATION_MARKER = "\n[... truncated ...]"


def truncate_payload(payload: str, max_chars: int) -> str:
    """Cut ``payload`` to ``max_chars`` characters (0 means no limit)."""
    if max_chars <= 0 or len(payload) <= max_chars:
        return payload
    return payload[:max_chars] + TRUNCATION_MARKER


def format_call_history(records: Iterable[CallRecord], max_payload_chars: int = 0) -> str:
    """
    Render calls and their results as numbered plain text.

    Example::

        1. http_get({"path": "/books"})
           Status: 200
           Response:
           [{"name": "A Game of Thrones"}]
    """
    blocks = []
    for i, record in enumerate(records, 1):
        lines = [f"{i}. {record.call.describe()}"]
        result = record.result
        if result.status_code is not None:
            lines.append(f"   Status: {result.status_code}")
        if not result.success:
            kind = result.error_kind.value if result.error_kind else "error"
            lines.append(f"   Failed ({kind}): {result.error}")
        lines.append("   Response:")
        lines.append("   " + truncate_payload(result.payload, max_payload_chars))
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)
