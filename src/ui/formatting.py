"""Formatting helpers for chat bubbles."""

import re
from collections.abc import Sequence
from datetime import datetime

from src.models.schemas import ChatMessage

_CODE_BLOCK = re.compile(r"```(\w*)\n?([\s\S]*?)```")
_INLINE_CODE = re.compile(r"`([^`]+)`")
_LINK = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
_BULLET = re.compile(r"^[-*]\s+")
_NUMBERED = re.compile(r"^\d+\.\s+")


def escape_html(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _wrap_lists(text: str, marker: re.Pattern[str], open_tag: str, close_tag: str) -> str:
    """Group consecutive lines starting with ``marker`` into one HTML list."""
    result: list[str] = []
    in_list = False
    for line in text.split("\n"):
        stripped = line.strip()
        if marker.match(stripped):
            if not in_list:
                result.append(open_tag)
                in_list = True
            result.append(f"<li>{marker.sub('', stripped)}</li>")
            continue
        if in_list:
            result.append(close_tag)
            in_list = False
        result.append(line)
    if in_list:
        result.append(close_tag)
    return "\n".join(result)


def markdown_to_html(text: str) -> str:
    """Convert the markdown subset Gemini commonly emits to HTML.

    Supports: code blocks, inline code, bold, italic, links, lists.
    Partial markdown (an unterminated code fence mid-stream) is left as text.
    """
    text = escape_html(text)

    text = _CODE_BLOCK.sub(
        r'<pre class="bg-gray-800 text-gray-100 rounded-lg p-3 my-2 overflow-x-auto text-xs">'
        r"<code>\2</code></pre>",
        text,
    )
    text = _INLINE_CODE.sub(
        r'<code class="bg-gray-200 text-pink-600 px-1.5 py-0.5 rounded text-xs">\1</code>',
        text,
    )

    text = re.sub(r"\*\*(.+?)\*\*", r"<strong>\1</strong>", text)
    text = re.sub(r"__(.+?)__", r"<strong>\1</strong>", text)
    text = re.sub(r"\*([^*]+)\*", r"<em>\1</em>", text)
    text = re.sub(r"_([^_]+)_", r"<em>\1</em>", text)

    text = _LINK.sub(r'<a href="\2" class="text-blue-600 underline" target="_blank">\1</a>', text)

    text = _wrap_lists(
        text, _BULLET, '<ul class="list-disc list-inside my-2 space-y-1">', "</ul>"
    )
    text = _wrap_lists(
        text, _NUMBERED, '<ol class="list-decimal list-inside my-2 space-y-1">', "</ol>"
    )

    return text.replace("\n", "<br>")


def format_timestamp(timestamp_ms: int) -> str:
    """Format an epoch-millisecond timestamp as a bubble time label."""
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%I:%M %p")


def visible_messages(
    messages: Sequence[ChatMessage], loading: bool
) -> list[ChatMessage]:
    """Messages to draw as bubbles.

    While a reply is loading, its still-empty placeholder is hidden; the
    typing indicator stands in for it until the first commit.
    """
    if loading and messages and not messages[-1].from_user and not messages[-1].text:
        return list(messages[:-1])
    return list(messages)
