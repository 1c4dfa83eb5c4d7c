"""Tests for the ReportLab renderer."""

from dataclasses import replace

import pytest
import requests

from storybook_creator.common import RenderingConfig
from storybook_creator.illustration import IllustrationResolver
from storybook_creator.pdf_generation import PAGE_SIZES, StorybookPDFBuilder, build_sections


@pytest.fixture
def offline(monkeypatch):
    """Make every illustration download fail."""
    calls = []

    def fake_get(url, timeout):
        calls.append(url)
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(requests, "get", fake_get)
    return calls


@pytest.fixture
def sections(story):
    return build_sections(story, IllustrationResolver().resolve(story))


class TestStorybookPDFBuilder:
    """Tests for StorybookPDFBuilder."""

    def test_render_returns_pdf_bytes(self, sections, offline, tmp_path):
        """Should render a PDF and skip illustrations that cannot be fetched."""
        builder = StorybookPDFBuilder(staging_dir=tmp_path / "staging")

        content = builder.render(sections)

        assert content.startswith(b"%PDF")
        assert len(offline) == 5

    def test_staging_file_removed_after_success(self, sections, offline, tmp_path):
        """Should leave the staging directory empty once bytes are read."""
        staging = tmp_path / "staging"

        StorybookPDFBuilder(staging_dir=staging).render(sections)

        assert list(staging.iterdir()) == []

    def test_staging_file_removed_after_failure(self, sections, monkeypatch, tmp_path):
        """Should remove the staging file when building fails."""
        staging = tmp_path / "staging"
        builder = StorybookPDFBuilder(staging_dir=staging)

        def explode(_sections, _path):
            raise RuntimeError("layout failed")

        monkeypatch.setattr(builder, "build", explode)

        with pytest.raises(RuntimeError):
            builder.render(sections)

        assert list(staging.iterdir()) == []

    def test_build_writes_file(self, sections, offline, tmp_path):
        """Should write the PDF to the requested path."""
        output = tmp_path / "out" / "story.pdf"

        StorybookPDFBuilder().build(sections, output)

        assert output.read_bytes().startswith(b"%PDF")

    def test_escapes_markup_in_text(self, story, offline, tmp_path):
        """Should render text containing markup characters."""
        tricky = replace(story, title="Pip & <Friends>")
        sections = build_sections(tricky, IllustrationResolver().resolve(tricky))

        assert StorybookPDFBuilder(staging_dir=tmp_path).render(sections).startswith(b"%PDF")


class TestFromConfig:
    """Tests for StorybookPDFBuilder.from_config."""

    def test_uses_configured_page_size(self):
        """Should look up the named page size."""
        builder = StorybookPDFBuilder.from_config(RenderingConfig(page_size="letter"))

        assert builder.page_size == PAGE_SIZES["letter"]

    def test_rejects_unknown_page_size(self):
        """Should raise for an unsupported page size name."""
        with pytest.raises(ValueError):
            StorybookPDFBuilder.from_config(RenderingConfig(page_size="poster"))
