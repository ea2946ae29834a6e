"""
Structured document builder for the clean PDF strategy.

Renders a page's typed blocks, together with its metadata, through
autoescaping Jinja2 templates so page text can never inject markup. Pages
extracted without blocks get them rebuilt from their text.
"""

import re
from datetime import date
from typing import List, Optional

from jinja2 import Environment, PackageLoader, select_autoescape

from .models import Block, PageContent


HEADING_PATTERN = re.compile(r'^(#{1,6})\s+(.*)$')
LIST_ITEM_PATTERN = re.compile(r'^[-*]\s+(.*)$')
CODE_FENCE = "```"

_environment: Optional[Environment] = None


def get_environment() -> Environment:
    """Template environment for the package's ``templates`` directory."""
    global _environment
    if _environment is None:
        _environment = Environment(
            loader=PackageLoader("docs_harvester", "templates"),
            autoescape=select_autoescape(["html"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
    return _environment


def build_blocks(text: str) -> List[Block]:
    """
    Split text into heading, list, code and paragraph blocks.

    Lines starting with ``#`` become headings, ``-``/``*`` lines become list
    items, fenced sections become code, and blank-line separated runs of
    other lines become paragraphs. Collapsed single-line text yields one
    paragraph.

    Args:
        text: Document body text

    Returns:
        Blocks in reading order
    """
    blocks: List[Block] = []
    paragraph: List[str] = []
    code: Optional[List[str]] = None

    def flush_paragraph():
        if paragraph:
            blocks.append(Block(kind="paragraph", text=" ".join(paragraph)))
            paragraph.clear()

    for raw_line in (text or "").splitlines():
        line = raw_line.strip()

        if code is not None:
            if line.startswith(CODE_FENCE):
                blocks.append(Block(kind="code", text="\n".join(code)))
                code = None
            else:
                code.append(raw_line)
            continue

        if line.startswith(CODE_FENCE):
            flush_paragraph()
            code = []
            continue

        if not line:
            flush_paragraph()
            continue

        heading = HEADING_PATTERN.match(line)
        if heading:
            flush_paragraph()
            blocks.append(Block(kind="heading", text=heading.group(2), level=len(heading.group(1))))
            continue

        item = LIST_ITEM_PATTERN.match(line)
        if item:
            flush_paragraph()
            if blocks and blocks[-1].kind == "list":
                blocks[-1].items.append(item.group(1))
            else:
                blocks.append(Block(kind="list", items=[item.group(1)]))
            continue

        paragraph.append(line)

    flush_paragraph()
    if code:
        # unterminated fence
        blocks.append(Block(kind="code", text="\n".join(code)))
    return blocks


def render_clean_document(content: PageContent, generated_on: Optional[date] = None) -> str:
    """
    Build the standalone HTML document printed by the clean strategy.

    Uses the blocks captured at extraction time; content without blocks is
    split with :func:`build_blocks`.

    Args:
        content: Extracted page content
        generated_on: Date shown in the metadata box (default: today)

    Returns:
        HTML string
    """
    template = get_environment().get_template("clean_document.html")
    return template.render(
        content=content,
        blocks=content.blocks or build_blocks(content.text),
        generated_on=(generated_on or date.today()).isoformat(),
    )


def render_pdf_header(title: str) -> str:
    """Header band showing the page title on every PDF page."""
    return get_environment().get_template("pdf_header.html").render(title=title)


def render_pdf_footer(generated_on: Optional[date] = None) -> str:
    """Footer band showing page numbers and the generation date."""
    return get_environment().get_template("pdf_footer.html").render(
        generated_on=(generated_on or date.today()).isoformat()
    )


def print_stylesheet() -> str:
    """Print CSS injected into the live page by the enhanced strategy."""
    return get_environment().get_template("print.css").render()
