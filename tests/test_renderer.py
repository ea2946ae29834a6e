"""Tests for artifact rendering: transcripts, clean documents and PDF strategies."""

from __future__ import annotations

import os
from datetime import date
from unittest.mock import AsyncMock

import pytest
from playwright.async_api import Error as PlaywrightError

from docs_harvester.crawler.document import (
    build_blocks,
    render_clean_document,
    render_pdf_footer,
    render_pdf_header,
)
from docs_harvester.crawler.extractor import extract_content
from docs_harvester.crawler.models import PageContent
from docs_harvester.crawler.renderer import (
    ArtifactRenderer,
    TRANSCRIPT_RULE,
    format_transcript,
)
from docs_harvester.utils.errors import ConfigurationError, RenderError


URL = "https://example.com/learn/system-design/intro"
TODAY = date(2024, 1, 1)
STEM = "learn-system-design-intro-2024-01-01"


def make_content(**overrides) -> PageContent:
    fields = dict(
        url=URL,
        title="Intro to Hashing",
        text="Consistent hashing spreads keys over a ring of nodes.",
        reading_time=1,
    )
    fields.update(overrides)
    return PageContent(**fields)


def make_renderer(session, tmp_path, strategy: str) -> ArtifactRenderer:
    return ArtifactRenderer(session, str(tmp_path), strategy=strategy, style_settle=0)


# ---------------------------------------------------------------------------
# Transcript
# ---------------------------------------------------------------------------

class TestFormatTranscript:
    def test_layout(self):
        transcript = format_transcript(make_content(), TODAY)

        assert transcript.splitlines() == [
            "Title: Intro to Hashing",
            f"URL: {URL}",
            "Date: 2024-01-01",
            "Reading Time: 1 minutes",
            "",
            TRANSCRIPT_RULE,
            "",
            "Consistent hashing spreads keys over a ring of nodes.",
        ]
        assert transcript.endswith("\n")

    def test_optional_metadata(self):
        transcript = format_transcript(
            make_content(description="All about hashing", author="Ada"), TODAY
        )
        lines = transcript.splitlines()

        assert lines[5:9] == ["Description: All about hashing", "", "Author: Ada", ""]
        assert lines[9] == TRANSCRIPT_RULE

    def test_rule_width(self):
        assert TRANSCRIPT_RULE == "=" * 80


# ---------------------------------------------------------------------------
# Clean document
# ---------------------------------------------------------------------------

class TestBuildBlocks:
    def test_collapsed_text_is_one_paragraph(self):
        blocks = build_blocks("One long collapsed line of text.")

        assert [(b.kind, b.text) for b in blocks] == [("paragraph", "One long collapsed line of text.")]

    def test_structured_text(self):
        text = "# Title\nFirst line\nsecond line\n\n- one\n* two\n```\nx = 1\n```\n## Next"
        blocks = build_blocks(text)

        assert [b.kind for b in blocks] == ["heading", "paragraph", "list", "code", "heading"]
        assert blocks[0].level == 1
        assert blocks[1].text == "First line second line"
        assert blocks[2].items == ["one", "two"]
        assert blocks[3].text == "x = 1"
        assert blocks[4].level == 2

    def test_unterminated_fence(self):
        blocks = build_blocks("```\nprint('hi')")

        assert [(b.kind, b.text) for b in blocks] == [("code", "print('hi')")]

    def test_empty(self):
        assert build_blocks("") == []


class TestCleanDocument:
    def test_metadata_box(self):
        html = render_clean_document(make_content(description="All about hashing"), TODAY)

        assert "<title>Intro to Hashing</title>" in html
        assert URL in html
        assert "2024-01-01" in html
        assert "All about hashing" in html
        assert "<p>Consistent hashing spreads keys over a ring of nodes.</p>" in html

    def test_page_text_is_escaped(self):
        html = render_clean_document(
            make_content(title="<script>alert(1)</script>", text="a < b & c"), TODAY
        )

        assert "<script>" not in html
        assert "&lt;script&gt;" in html
        assert "a &lt; b &amp; c" in html

    def test_structure_survives_from_page_markup(self):
        body = (
            "Consistent hashing spreads keys over a ring of nodes so that adding "
            "a node only moves a small share of them."
        )
        html = (
            '<html><head><title>Sharding</title></head><body><div id="markdown">'
            f'<h2>Strategies</h2><p>{body}</p>'
            '<ul><li>Range based</li><li>Hash based</li></ul>'
            '<pre>shard = hash(key) % n</pre>'
            '<p>Use a &lt;script&gt; tag never</p>'
            '</div></body></html>'
        )
        content = extract_content(html, URL)

        document = render_clean_document(content, TODAY)

        assert "<h2>Strategies</h2>" in document
        assert "<li>Range based</li><li>Hash based</li>" in document
        assert "<pre><code>shard = hash(key) % n</code></pre>" in document
        assert document.count("<p>") == 2
        assert "Use a &lt;script&gt; tag never" in document

    def test_text_only_content_is_split(self):
        html = render_clean_document(make_content(text="# Heading\nBody line"), TODAY)

        assert "<h1>Heading</h1>" in html
        assert "<p>Body line</p>" in html

    def test_header_and_footer(self):
        header = render_pdf_header("Tips & <Tricks>")
        footer = render_pdf_footer(TODAY)

        assert "Tips &amp; &lt;Tricks&gt;" in header
        assert 'class="pageNumber"' in footer
        assert 'class="totalPages"' in footer
        assert "2024-01-01" in footer


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

class TestArtifactRenderer:
    def test_unknown_strategy(self, session, tmp_path):
        with pytest.raises(ConfigurationError):
            ArtifactRenderer(session, str(tmp_path), strategy="fancy")

    async def test_basic_prints_page_as_is(self, session, page, tmp_path):
        renderer = make_renderer(session, tmp_path, "basic")

        paths = await renderer.render(page, make_content(), generated_on=TODAY)

        assert paths.pdf_path == str(tmp_path / f"{STEM}.pdf")
        assert paths.text_path == str(tmp_path / f"{STEM}.txt")
        page.evaluate.assert_not_awaited()
        kwargs = page.pdf.await_args.kwargs
        assert kwargs["path"] == paths.pdf_path
        assert kwargs["format"] == "Letter"
        assert kwargs["print_background"] is True
        assert os.path.exists(paths.text_path)

    async def test_index_prefix(self, session, page, tmp_path):
        renderer = make_renderer(session, tmp_path, "basic")

        paths = await renderer.render(page, make_content(), index=7, generated_on=TODAY)

        assert os.path.basename(paths.pdf_path) == f"7-{STEM}.pdf"

    async def test_url_overrides_content_url(self, session, page, tmp_path):
        renderer = make_renderer(session, tmp_path, "basic")

        paths = await renderer.render(
            page, make_content(), url="https://example.com/learn/other", generated_on=TODAY
        )

        assert os.path.basename(paths.text_path) == "learn-other-2024-01-01.txt"

    async def test_enhanced_rereads_printed_text(self, session, page, tmp_path):
        printed = "Printed article body with the sidebar removed before export."
        page.content = AsyncMock(
            return_value=f'<html><body><div id="markdown"><p>{printed}</p></div></body></html>'
        )
        renderer = make_renderer(session, tmp_path, "enhanced")

        paths = await renderer.render(
            page, make_content(text="Original text with sidebar"), generated_on=TODAY
        )

        page.evaluate.assert_awaited_once()
        options = page.evaluate.await_args.args[1]
        assert options["isolate"] is False
        assert options["primarySelector"] == "#markdown"
        kwargs = page.pdf.await_args.kwargs
        assert kwargs["display_header_footer"] is True
        assert "Intro to Hashing" in kwargs["header_template"]

        with open(paths.text_path, encoding="utf-8") as f:
            transcript = f.read()
        assert printed in transcript
        assert "Original text with sidebar" not in transcript

    async def test_enhanced_isolates_long_primary(self, session, page, tmp_path):
        renderer = make_renderer(session, tmp_path, "enhanced")

        await renderer.render(
            page, make_content(primary_found=True, primary_length=5000), generated_on=TODAY
        )

        assert page.evaluate.await_args.args[1]["isolate"] is True

    async def test_enhanced_keeps_text_when_reread_is_empty(self, session, page, tmp_path):
        renderer = make_renderer(session, tmp_path, "enhanced")

        paths = await renderer.render(page, make_content(), generated_on=TODAY)

        with open(paths.text_path, encoding="utf-8") as f:
            assert "Consistent hashing spreads keys" in f.read()

    async def test_clean_prints_isolated_page(self, session, page, tmp_path):
        clean_page = session.new_page.return_value
        renderer = make_renderer(session, tmp_path, "clean")

        paths = await renderer.render(page, make_content(title="A <b>bold</b> title"), generated_on=TODAY)

        page.pdf.assert_not_awaited()
        html = clean_page.set_content.await_args.args[0]
        assert "&lt;b&gt;bold&lt;/b&gt;" in html
        assert clean_page.pdf.await_args.kwargs["path"] == paths.pdf_path
        clean_page.close.assert_awaited_once()

    async def test_clean_page_closed_on_failure(self, session, page, tmp_path):
        clean_page = session.new_page.return_value
        clean_page.pdf = AsyncMock(side_effect=PlaywrightError("Target closed"))
        renderer = make_renderer(session, tmp_path, "clean")

        with pytest.raises(RenderError):
            await renderer.render(page, make_content(), generated_on=TODAY)

        clean_page.close.assert_awaited_once()

    async def test_closed_session_is_render_error(self, session, page, tmp_path):
        session.new_page = AsyncMock(side_effect=RuntimeError("Browser session is not open"))
        renderer = make_renderer(session, tmp_path, "clean")

        with pytest.raises(RenderError, match="not open"):
            await renderer.render(page, make_content(), generated_on=TODAY)

    async def test_pdf_failure_is_render_error(self, session, page, tmp_path):
        page.pdf = AsyncMock(side_effect=PlaywrightError("Printing failed"))
        renderer = make_renderer(session, tmp_path, "basic")

        with pytest.raises(RenderError, match="Printing failed"):
            await renderer.render(page, make_content(), generated_on=TODAY)

    async def test_creates_output_directory(self, session, page, tmp_path):
        output = tmp_path / "nested" / "out"
        renderer = ArtifactRenderer(session, str(output), strategy="basic")

        paths = await renderer.render(page, make_content(), generated_on=TODAY)

        assert os.path.isdir(output)
        assert os.path.exists(paths.text_path)
