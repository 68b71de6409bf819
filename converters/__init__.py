"""Converters package for Notion block and property conversion."""

import logging

from .markdown_converter import MarkdownConverter, blocks_to_markdown
from .property_extractor import extract_properties, extract_property_value, extract_title
from .rich_text import plain_text, render_rich_text, render_run


def convert_page(blocks, title, logger=None):
    """
    Convenience function to render a hydrated block tree as markdown.

    Args:
        blocks: Top-level Block objects with children attached
        title: Page title
        logger: Optional logger instance (uses module logger if not provided)

    Returns:
        Markdown text

    Example:
        >>> from converters import convert_page
        >>> from models import Block
        >>> convert_page([Block(id='1', type='divider')], 'Notes')
        '# Notes\\n\\n---\\n'
    """
    if logger is None:
        logger = logging.getLogger('spoketome.converters')

    converter = MarkdownConverter(logger=logger)
    return converter.render_document(blocks, title)


__all__ = [
    'convert_page',
    'MarkdownConverter',
    'blocks_to_markdown',
    'extract_properties',
    'extract_property_value',
    'extract_title',
    'plain_text',
    'render_rich_text',
    'render_run',
]
