"""
Artifact renderer producing PDF documents and text transcripts.

Uses Playwright's PDF export under one of three strategies:

* ``basic``    - print the loaded page as it is
* ``enhanced`` - strip site chrome, optionally isolate the primary content,
  inject print styling, then print with header/footer bands
* ``clean``    - print a freshly built minimal document on an isolated page
"""

import asyncio
import dataclasses
import os
from datetime import date
from typing import Optional

from playwright.async_api import Page, Error as PlaywrightError

from .document import (
    print_stylesheet,
    render_clean_document,
    render_pdf_footer,
    render_pdf_header,
)
from .extractor import extract_content, reading_time
from .models import ArtifactPaths, ExtractionRules, PageContent
from .session import BrowserSession
from ..utils import constants
from ..utils.errors import ConfigurationError, RenderError
from ..utils.log import get_logger
from ..utils.paths import artifact_stem, ensure_dir


PAGE_FORMAT = "Letter"

BASIC_MARGIN = {"top": "1in", "right": "0.75in", "bottom": "0.75in", "left": "0.75in"}
ENHANCED_MARGIN = {"top": "0.5in", "right": "0.3in", "bottom": "0.75in", "left": "0.7in"}
CLEAN_MARGIN = {"top": "0.5in", "right": "0.5in", "bottom": "0.5in", "left": "0.5in"}

PREPARE_PRINT_SCRIPT = """
({ chromeSelector, primarySelector, isolate, css }) => {
  document.querySelectorAll(chromeSelector).forEach(el => el.remove());

  if (isolate) {
    const primary = document.querySelector(primarySelector);
    if (primary) {
      document.body.replaceChildren(primary.cloneNode(true));
    }
  }

  const style = document.createElement('style');
  style.textContent = css;
  document.head.appendChild(style);
}
"""

TRANSCRIPT_RULE = "=" * 80


def format_transcript(content: PageContent, generated_on: Optional[date] = None) -> str:
    """
    Lay out the plain-text transcript of a page.

    Args:
        content: Extracted page content
        generated_on: Date written in the header (default: today)

    Returns:
        Transcript text
    """
    generated_on = generated_on or date.today()
    lines = [
        f"Title: {content.title}",
        f"URL: {content.url}",
        f"Date: {generated_on.isoformat()}",
        f"Reading Time: {content.reading_time} minutes",
        "",
    ]
    if content.description:
        lines += [f"Description: {content.description}", ""]
    if content.author:
        lines += [f"Author: {content.author}", ""]
    lines += [TRANSCRIPT_RULE, "", content.text, ""]
    return "\n".join(lines)


class ArtifactRenderer:
    """
    Writes the PDF and text artifacts for a harvested page.
    """

    def __init__(
        self,
        session: BrowserSession,
        output_dir: str,
        strategy: str = constants.DEFAULT_STRATEGY,
        rules: Optional[ExtractionRules] = None,
        style_settle: float = constants.STYLE_SETTLE
    ):
        """
        Initialize the renderer.

        Args:
            session: Open browser session (used for clean-strategy pages)
            output_dir: Directory receiving the artifacts
            strategy: 'basic', 'enhanced' or 'clean'
            rules: Extraction rules, used to re-read enhanced pages
            style_settle: Seconds to wait after injecting print styles

        Raises:
            ConfigurationError: If the strategy is unknown
        """
        if strategy not in constants.PDF_STRATEGIES:
            raise ConfigurationError(
                f"Unknown PDF strategy {strategy!r}; "
                f"expected one of {', '.join(constants.PDF_STRATEGIES)}"
            )

        self.session = session
        self.output_dir = os.path.abspath(output_dir)
        self.strategy = strategy
        self.rules = rules or ExtractionRules()
        self.style_settle = style_settle
        self.logger = get_logger("renderer")

    async def render(
        self,
        page: Page,
        content: PageContent,
        url: Optional[str] = None,
        index: Optional[int] = None,
        generated_on: Optional[date] = None
    ) -> ArtifactPaths:
        """
        Write the PDF and the transcript for one page.

        Args:
            page: Page the content was extracted from
            content: Extracted content
            url: URL the file names derive from (default: content URL)
            index: Optional 1-based batch index used as file name prefix
            generated_on: Generation date (default: today)

        Returns:
            Paths of the written files

        Raises:
            RenderError: If the PDF or transcript cannot be produced
        """
        generated_on = generated_on or date.today()
        stem = artifact_stem(url or content.url, index, generated_on)
        pdf_path = os.path.join(self.output_dir, f"{stem}.pdf")
        text_path = os.path.join(self.output_dir, f"{stem}.txt")

        try:
            ensure_dir(self.output_dir)

            if self.strategy == constants.STRATEGY_CLEAN:
                await self._render_clean(pdf_path, content, generated_on)
            elif self.strategy == constants.STRATEGY_BASIC:
                await self._render_basic(page, pdf_path)
            else:
                await self._render_enhanced(page, pdf_path, content, generated_on)
                content = await self._reread(page, content)

            with open(text_path, 'w', encoding='utf-8') as f:
                f.write(format_transcript(content, generated_on))

        except PlaywrightError as e:
            raise RenderError(f"PDF generation failed for {content.url}: {e.message}") from e
        except OSError as e:
            raise RenderError(f"Cannot write artifacts for {content.url}: {e}") from e

        self.logger.debug(f"PDF saved to: {pdf_path}")
        self.logger.debug(f"Text saved to: {text_path}")
        return ArtifactPaths(pdf_path=pdf_path, text_path=text_path)

    async def _render_basic(self, page: Page, pdf_path: str) -> None:
        await page.pdf(
            path=pdf_path,
            format=PAGE_FORMAT,
            print_background=True,
            margin=BASIC_MARGIN,
        )

    async def _render_enhanced(
        self,
        page: Page,
        pdf_path: str,
        content: PageContent,
        generated_on: date
    ) -> None:
        isolate = (
            content.primary_found
            and content.primary_length > constants.ISOLATE_PRIMARY_LENGTH
        )
        await page.evaluate(PREPARE_PRINT_SCRIPT, {
            "chromeSelector": ", ".join(constants.PRINT_CHROME_SELECTORS),
            "primarySelector": self.rules.primary_selector,
            "isolate": isolate,
            "css": print_stylesheet(),
        })

        # Let the injected styles apply
        await asyncio.sleep(self.style_settle)

        await page.pdf(
            path=pdf_path,
            format=PAGE_FORMAT,
            print_background=True,
            margin=ENHANCED_MARGIN,
            display_header_footer=True,
            header_template=render_pdf_header(content.title),
            footer_template=render_pdf_footer(generated_on),
            prefer_css_page_size=True,
        )

    async def _reread(self, page: Page, content: PageContent) -> PageContent:
        """Re-extract the text as it was printed after chrome removal."""
        printed = extract_content(await page.content(), content.url, self.rules)
        if not printed.text:
            return content
        return dataclasses.replace(
            content,
            text=printed.text,
            blocks=printed.blocks,
            reading_time=reading_time(printed.text),
        )

    async def _render_clean(
        self,
        pdf_path: str,
        content: PageContent,
        generated_on: date
    ) -> None:
        html = render_clean_document(content, generated_on)

        try:
            clean_page = await self.session.new_page()
        except RuntimeError as e:
            raise RenderError(f"Cannot open a page for {content.url}: {e}") from e

        try:
            await clean_page.set_content(html, wait_until="load")
            await clean_page.pdf(
                path=pdf_path,
                format=PAGE_FORMAT,
                print_background=True,
                margin=CLEAN_MARGIN,
                display_header_footer=False,
            )
        finally:
            await clean_page.close()
