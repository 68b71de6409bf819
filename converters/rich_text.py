"""Inline styling of Notion rich text runs."""

from typing import Iterable

from models import RichTextRun


def render_run(run: RichTextRun) -> str:
    """
    Render one run as inline markdown.

    Styles wrap in a fixed order, innermost first: code, bold, italic,
    strikethrough, then the link. Underline has no markdown equivalent.
    """
    text = run.text
    if run.code:
        text = f"`{text}`"
    if run.bold:
        text = f"**{text}**"
    if run.italic:
        text = f"*{text}*"
    if run.strikethrough:
        text = f"~~{text}~~"
    if run.href:
        text = f"[{text}]({run.href})"
    return text


def render_rich_text(runs: Iterable[RichTextRun]) -> str:
    return ''.join(render_run(run) for run in runs)


def plain_text(runs: Iterable[RichTextRun]) -> str:
    return ''.join(run.text for run in runs)


__all__ = ['render_run', 'render_rich_text', 'plain_text']
