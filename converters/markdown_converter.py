"""Markdown converter for Notion block trees."""

import logging
from typing import Any, Dict, List, Optional, Sequence

from models import Block, RichTextRun
from .rich_text import render_rich_text

INDENT = '  '
PLAIN_TEXT_LANGUAGE = 'plain text'

# Fallback link text when a media block has no caption
MEDIA_LABELS = {
    'image': 'Image',
    'video': 'Video',
    'pdf': 'PDF',
    'file': 'File',
}


class MarkdownConverter:
    """
    Converts a hydrated Notion block tree into markdown.

    Each block type is handled by a ``convert_<type>`` method taking the block
    and its nesting depth. Unknown types render as an HTML comment placeholder,
    so conversion never fails on unfamiliar content.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger('spoketome.converters.markdownconverter')

    def render_document(self, blocks: Sequence[Block], title: str) -> str:
        """
        Convert top-level blocks into a full markdown document.

        Args:
            blocks: Top-level blocks in page order, children already attached
            title: Page title, emitted as the level-1 heading

        Returns:
            Markdown text
        """
        lines = [f"# {title}", ""]

        for block in blocks:
            markdown = self.render_block(block)
            if markdown != "":
                lines.append(markdown)
                lines.append("")

        return "\n".join(lines)

    def render_block(self, block: Block, depth: int = 0) -> str:
        """Convert a single block (and its children) at the given depth."""
        handler = getattr(self, f"convert_{block.type}", None)
        if handler is None:
            return f"{self._prefix(depth)}<!-- unsupported block: {block.type} -->"

        try:
            return handler(block, depth)
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            self.logger.warning(f"Malformed {block.type} block {block.id}: {e}")
            return f"{self._prefix(depth)}<!-- malformed block: {block.type} -->"

    # Helpers

    @staticmethod
    def _prefix(depth: int) -> str:
        return INDENT * depth

    @staticmethod
    def _text(block: Block, key: str = 'rich_text') -> str:
        return render_rich_text(block.rich_text(key))

    def _children(self, block: Block, depth: int, separator: str) -> str:
        return separator.join(self.render_block(child, depth) for child in block.children)

    def _list_item(self, block: Block, depth: int, marker: str) -> str:
        text = f"{self._prefix(depth)}{marker}{self._text(block)}"
        children = self._children(block, depth + 1, "\n")
        return f"{text}\n{children}" if children else text

    def _layout(self, block: Block, depth: int) -> str:
        return self._children(block, depth, "\n\n")

    @staticmethod
    def _media_url(payload: Dict[str, Any]) -> str:
        """Return the URL of an external or Notion-hosted file object."""
        if payload.get('type') == 'external':
            return (payload.get('external') or {}).get('url', '')
        if payload.get('type') == 'file':
            return (payload.get('file') or {}).get('url', '')
        return (payload.get('external') or payload.get('file') or {}).get('url', '')

    def _caption(self, block: Block) -> str:
        return render_rich_text(block.rich_text('caption'))

    def _media_link(self, block: Block, depth: int) -> str:
        label = self._caption(block) or MEDIA_LABELS.get(block.type, block.type)
        return f"{self._prefix(depth)}[{label}]({self._media_url(block.payload)})"

    def _url_link(self, block: Block, depth: int) -> str:
        url = block.payload.get('url', '')
        label = self._caption(block) or url
        return f"{self._prefix(depth)}[{label}]({url})"

    # Text blocks

    def convert_paragraph(self, block: Block, depth: int) -> str:
        return self._prefix(depth) + self._text(block)

    def convert_heading_1(self, block: Block, depth: int) -> str:
        return f"# {self._text(block)}"

    def convert_heading_2(self, block: Block, depth: int) -> str:
        return f"## {self._text(block)}"

    def convert_heading_3(self, block: Block, depth: int) -> str:
        return f"### {self._text(block)}"

    def convert_bulleted_list_item(self, block: Block, depth: int) -> str:
        return self._list_item(block, depth, "- ")

    def convert_numbered_list_item(self, block: Block, depth: int) -> str:
        return self._list_item(block, depth, "1. ")

    def convert_to_do(self, block: Block, depth: int) -> str:
        checkbox = "[x]" if block.payload.get('checked') else "[ ]"
        return self._list_item(block, depth, f"- {checkbox} ")

    def convert_quote(self, block: Block, depth: int) -> str:
        prefix = self._prefix(depth)
        return "\n".join(f"{prefix}> {line}" for line in self._text(block).split("\n"))

    def convert_callout(self, block: Block, depth: int) -> str:
        icon = (block.payload.get('icon') or {}).get('emoji')
        text = f"{icon} {self._text(block)}" if icon else self._text(block)
        return f"{self._prefix(depth)}> {text}"

    def convert_toggle(self, block: Block, depth: int) -> str:
        prefix = self._prefix(depth)
        summary = f"{prefix}<details><summary>{self._text(block)}</summary>\n"
        children = self._children(block, depth, "\n\n")
        return f"{summary}\n{children}\n\n{prefix}</details>"

    def convert_code(self, block: Block, depth: int) -> str:
        language = block.payload.get('language') or ''
        if language == PLAIN_TEXT_LANGUAGE:
            language = ''
        return f"{self._prefix(depth)}```{language}\n{self._text(block)}\n```"

    def convert_divider(self, block: Block, depth: int) -> str:
        return f"{self._prefix(depth)}---"

    def convert_equation(self, block: Block, depth: int) -> str:
        return f"{self._prefix(depth)}$${block.payload.get('expression', '')}$$"

    def convert_table_of_contents(self, block: Block, depth: int) -> str:
        return f"{self._prefix(depth)}*(Table of contents)*"

    def convert_breadcrumb(self, block: Block, depth: int) -> str:
        return ""

    # Media and links

    def convert_image(self, block: Block, depth: int) -> str:
        label = self._caption(block) or MEDIA_LABELS['image']
        return f"{self._prefix(depth)}![{label}]({self._media_url(block.payload)})"

    def convert_video(self, block: Block, depth: int) -> str:
        return self._media_link(block, depth)

    def convert_pdf(self, block: Block, depth: int) -> str:
        return self._media_link(block, depth)

    def convert_file(self, block: Block, depth: int) -> str:
        label = self._caption(block) or block.payload.get('name') or MEDIA_LABELS['file']
        return f"{self._prefix(depth)}[{label}]({self._media_url(block.payload)})"

    def convert_bookmark(self, block: Block, depth: int) -> str:
        return self._url_link(block, depth)

    def convert_link_preview(self, block: Block, depth: int) -> str:
        return self._url_link(block, depth)

    def convert_embed(self, block: Block, depth: int) -> str:
        return self._url_link(block, depth)

    # Tables

    def convert_table(self, block: Block, depth: int) -> str:
        rows = [self._table_cells(row) for row in block.children]
        if not rows:
            return ""

        lines = [self._table_line(cells) for cells in rows]

        # A separator always follows the first row, even when has_column_header
        # is false; markdown tables need one to render at all.
        separator = self._table_line(["---"] * len(rows[0]))
        lines.insert(1, separator)

        return "\n".join(lines)

    def convert_table_row(self, block: Block, depth: int) -> str:
        # Rendered by the parent table
        return ""

    def _table_cells(self, row: Block) -> List[str]:
        cells = row.payload.get('cells') or []
        return [
            render_rich_text(RichTextRun.list_from_api(cell))
            for cell in cells
            if isinstance(cell, list)
        ]

    @staticmethod
    def _table_line(cells: List[str]) -> str:
        return f"| {' | '.join(cells)} |"

    # Layout containers

    def convert_column_list(self, block: Block, depth: int) -> str:
        return self._layout(block, depth)

    def convert_column(self, block: Block, depth: int) -> str:
        return self._layout(block, depth)

    def convert_synced_block(self, block: Block, depth: int) -> str:
        return self._layout(block, depth)

    # Boundaries to other documents

    def convert_child_page(self, block: Block, depth: int) -> str:
        return f"{self._prefix(depth)}[{block.payload.get('title', '')}] (child page)"

    def convert_child_database(self, block: Block, depth: int) -> str:
        return f"{self._prefix(depth)}[{block.payload.get('title', '')}] (child database)"


def blocks_to_markdown(blocks: Sequence[Block], title: str) -> str:
    """Convert top-level blocks to markdown with a default converter."""
    return MarkdownConverter().render_document(blocks, title)


__all__ = ['MarkdownConverter', 'blocks_to_markdown']
