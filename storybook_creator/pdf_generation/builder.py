"""
ReportLab rendering of storybook sections into printable PDFs.
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Optional, Sequence
from xml.sax.saxutils import escape

import requests
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT, TA_RIGHT
from reportlab.lib.pagesizes import A4, LETTER
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import inch, mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas
from reportlab.platypus import Frame, Paragraph

from storybook_creator.common import RenderingConfig

from .composer import TITLE_SUBTITLE, DocumentSection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageLayoutConfig:
    page_background: colors.Color
    title_background: colors.Color
    accent_color: colors.Color
    text_color: colors.Color
    muted_color: colors.Color
    characters_background: colors.Color


DEFAULT_LAYOUT = PageLayoutConfig(
    page_background=colors.white,
    title_background=colors.HexColor("#FF9A9E"),
    accent_color=colors.HexColor("#667EEA"),
    text_color=colors.HexColor("#333333"),
    muted_color=colors.HexColor("#999999"),
    characters_background=colors.HexColor("#F8F9FA"),
)


PAGE_SIZES = {
    "a4": A4,
    "letter": LETTER,
    "square": (8 * inch, 8 * inch),
}

MAX_IMAGE_WIDTH = 450
MAX_IMAGE_HEIGHT = 350


class StorybookPDFBuilder:
    """
    Render storybook sections into a PDF.

    The builder creates:
      * A title page with the story title, subtitle and a characters box.
      * One page per story section: the narrative text above its illustration and
        the page number in the bottom-right corner.

    Illustrations that cannot be downloaded are left out of the page.
    """

    def __init__(
        self,
        *,
        page_size: tuple[float, float] = PAGE_SIZES["a4"],
        margin_mm: float = 20.0,
        layout: PageLayoutConfig = DEFAULT_LAYOUT,
        request_timeout: float = 30.0,
        staging_dir: Path | str | None = None,
    ) -> None:
        self.page_size = page_size
        self.margin = margin_mm * mm
        self.layout = layout
        self.request_timeout = request_timeout
        self.staging_dir = Path(staging_dir) if staging_dir is not None else None

        self.body_font, self.body_bold_font = self._configure_story_fonts()

        self.title_style = ParagraphStyle(
            name="StoryTitle",
            fontName=self.body_bold_font,
            fontSize=36,
            leading=42,
            alignment=TA_CENTER,
            textColor=self.layout.text_color,
            spaceAfter=20,
        )
        self.subtitle_style = ParagraphStyle(
            name="StorySubtitle",
            fontName="Helvetica-Oblique",
            fontSize=18,
            leading=22,
            alignment=TA_CENTER,
            textColor=colors.HexColor("#666666"),
            spaceAfter=40,
        )
        self.characters_style = ParagraphStyle(
            name="Characters",
            fontName=self.body_font,
            fontSize=14,
            leading=18,
            alignment=TA_LEFT,
            textColor=colors.HexColor("#666666"),
            backColor=self.layout.characters_background,
            borderColor=self.layout.accent_color,
            borderWidth=0,
            borderPadding=15,
        )
        self.body_style = ParagraphStyle(
            name="Body",
            fontName=self.body_font,
            fontSize=18,
            leading=32,
            alignment=TA_CENTER,
            textColor=self.layout.text_color,
            spaceAfter=16,
        )
        self.page_number_style = ParagraphStyle(
            name="PageNumber",
            fontName="Helvetica-Bold",
            fontSize=14,
            leading=16,
            alignment=TA_RIGHT,
            textColor=self.layout.muted_color,
        )

    @classmethod
    def from_config(cls, config: RenderingConfig) -> "StorybookPDFBuilder":
        try:
            page_size = PAGE_SIZES[config.page_size.lower()]
        except KeyError as exc:
            raise ValueError(
                f"Unsupported page size '{config.page_size}'. "
                f"Choose one of: {', '.join(sorted(PAGE_SIZES))}."
            ) from exc
        return cls(
            page_size=page_size,
            margin_mm=config.margin_mm,
            request_timeout=config.request_timeout,
            staging_dir=config.staging_dir,
        )

    def render(self, sections: Sequence[DocumentSection]) -> bytes:
        """
        Render into a staging file, read it back, and always remove the staging file.
        """
        if self.staging_dir is not None:
            self.staging_dir.mkdir(parents=True, exist_ok=True)

        handle, staging_name = tempfile.mkstemp(
            prefix="storybook_",
            suffix=".pdf",
            dir=self.staging_dir,
        )
        os.close(handle)
        staging_path = Path(staging_name)
        try:
            self.build(sections, staging_path)
            return staging_path.read_bytes()
        finally:
            staging_path.unlink(missing_ok=True)
            logger.debug("Removed staging file %s", staging_path)

    def build(self, sections: Sequence[DocumentSection], output_path: Path | str) -> None:
        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)

        pdf = canvas.Canvas(str(output_file), pagesize=self.page_size)
        width, height = self.page_size

        for section in sections:
            if section.kind == "title":
                pdf.setTitle(section.heading)
                self._draw_title_page(pdf, section, width, height)
            else:
                self._draw_story_page(pdf, section, width, height)

        pdf.save()

    # ------------------------------------------------------------------ title page

    def _draw_title_page(
        self,
        pdf: canvas.Canvas,
        section: DocumentSection,
        width: float,
        height: float,
    ) -> None:
        pdf.setFillColor(self.layout.title_background)
        pdf.rect(0, 0, width, height, stroke=0, fill=1)

        pdf.saveState()
        pdf.setFillColor(self._lighten(self.layout.title_background, 0.6))
        pdf.rect(0, 0, width, height / 2, stroke=0, fill=1)
        pdf.restoreState()

        self._draw_sparkles(pdf, 0, 0, width, height)

        frame = Frame(
            self.margin,
            self.margin,
            width - 2 * self.margin,
            height - 2 * self.margin,
            showBoundary=0,
            topPadding=height * 0.25,
        )

        intro = [
            Paragraph(escape(section.heading), self.title_style),
            Paragraph(TITLE_SUBTITLE, self.subtitle_style),
        ]
        if section.body:
            intro.append(
                Paragraph(
                    f"Characters: {escape(section.body)}",
                    self.characters_style,
                )
            )

        frame.addFromList(intro, pdf)
        pdf.showPage()

    # ------------------------------------------------------------------ story pages

    def _draw_story_page(
        self,
        pdf: canvas.Canvas,
        section: DocumentSection,
        width: float,
        height: float,
    ) -> None:
        pdf.setFillColor(self.layout.page_background)
        pdf.rect(0, 0, width, height, stroke=0, fill=1)

        content_width = width - 2 * self.margin
        image_box_height = min(MAX_IMAGE_HEIGHT, (height - 2 * self.margin) / 2)
        text_bottom = self.margin + image_box_height + 20

        frame = Frame(
            self.margin,
            text_bottom,
            content_width,
            height - self.margin - text_bottom,
            showBoundary=0,
        )
        paragraphs = [
            Paragraph(escape(block).replace("\n", "<br/>"), self.body_style)
            for block in filter(None, (part.strip() for part in section.body.split("\n\n")))
        ]
        frame.addFromList(paragraphs, pdf)

        image_reader = self._fetch_image(section.illustration) if section.illustration else None
        if image_reader is not None:
            self._draw_illustration(
                pdf,
                image_reader,
                box_x=self.margin,
                box_y=self.margin,
                box_width=content_width,
                box_height=image_box_height,
            )

        if section.page_number is not None:
            self._draw_page_number(pdf, section.page_number, width)
        pdf.showPage()

    def _draw_illustration(
        self,
        pdf: canvas.Canvas,
        image_reader: ImageReader,
        *,
        box_x: float,
        box_y: float,
        box_width: float,
        box_height: float,
    ) -> None:
        img_width, img_height = image_reader.getSize()
        scale = min(
            min(box_width, MAX_IMAGE_WIDTH) / img_width,
            box_height / img_height,
        )
        draw_width = img_width * scale
        draw_height = img_height * scale
        x = box_x + (box_width - draw_width) / 2
        y = box_y + (box_height - draw_height) / 2

        pdf.saveState()
        pdf.setFillColor(colors.white)
        pdf.setStrokeColor(colors.white)
        pdf.setLineWidth(3)
        pdf.roundRect(x - 3, y - 3, draw_width + 6, draw_height + 6, 15, stroke=1, fill=1)
        pdf.restoreState()

        pdf.drawImage(
            image_reader,
            x,
            y,
            draw_width,
            draw_height,
            preserveAspectRatio=True,
            mask="auto",
        )

    # ------------------------------------------------------------------ helpers

    def _draw_page_number(self, pdf: canvas.Canvas, page_number: int, width: float) -> None:
        number_frame = Frame(
            self.margin,
            10,
            width - 2 * self.margin,
            24,
            showBoundary=0,
        )
        number_frame.addFromList([Paragraph(str(page_number), self.page_number_style)], pdf)

    def _fetch_image(self, url: str) -> Optional[ImageReader]:
        try:
            response = requests.get(url, timeout=self.request_timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("Skipping illustration %s: %s", url, exc)
            return None
        try:
            return ImageReader(BytesIO(response.content))
        except OSError as exc:
            logger.warning("Skipping unreadable illustration %s: %s", url, exc)
            return None

    def _draw_sparkles(
        self,
        pdf: canvas.Canvas,
        x: float,
        y: float,
        width: float,
        height: float,
    ) -> None:
        sparkles = [
            (x + width * 0.18, y + height * 0.82, 6),
            (x + width * 0.82, y + height * 0.78, 9),
            (x + width * 0.25, y + height * 0.32, 5),
            (x + width * 0.74, y + height * 0.28, 6),
            (x + width * 0.5, y + height * 0.9, 4),
        ]
        pdf.saveState()
        pdf.setFillColor(self._lighten(self.layout.accent_color, 0.6))
        for cx, cy, radius in sparkles:
            pdf.circle(cx, cy, radius, stroke=0, fill=1)
        pdf.restoreState()

    @staticmethod
    def _lighten(color: colors.Color, amount: float = 0.5) -> colors.Color:
        amount = max(0.0, min(amount, 1.0))
        r = color.red + (1 - color.red) * amount
        g = color.green + (1 - color.green) * amount
        b = color.blue + (1 - color.blue) * amount
        return colors.Color(r, g, b)

    def _configure_story_fonts(self) -> tuple[str, str]:
        playful_options = [
            (
                "ComicSansMS",
                "ComicSansMS-Bold",
                ["Comic Sans MS.ttf", "ComicSansMS.ttf", "comic.ttf"],
                ["Comic Sans MS Bold.ttf", "ComicSansMS-Bold.ttf", "comicbd.ttf"],
            ),
            (
                "ChalkboardSE-Light",
                "ChalkboardSE-Bold",
                ["ChalkboardSE-Light.ttf", "ChalkboardSE.ttc"],
                ["ChalkboardSE-Bold.ttf"],
            ),
        ]

        search_roots = [
            Path("/Library/Fonts"),
            Path("/System/Library/Fonts"),
            Path.home() / "Library" / "Fonts",
            Path("C:/Windows/Fonts"),
            Path("/usr/share/fonts"),
            Path("/usr/share/fonts/truetype/msttcorefonts"),
            Path("/usr/local/share/fonts"),
        ]

        for regular_name, bold_name, regular_candidates, bold_candidates in playful_options:
            regular_ready = self._register_font_if_available(regular_name, regular_candidates, search_roots)
            bold_ready = self._register_font_if_available(bold_name, bold_candidates, search_roots)
            if regular_ready and bold_ready:
                return regular_name, bold_name

        return "Helvetica", "Helvetica-Bold"

    @staticmethod
    def _register_font_if_available(
        font_name: str,
        candidate_filenames: Sequence[str],
        search_roots: Sequence[Path],
    ) -> bool:
        if font_name in pdfmetrics.getRegisteredFontNames():
            return True

        for root in search_roots:
            for candidate in candidate_filenames:
                font_path = root / candidate
                if font_path.exists():
                    try:
                        pdfmetrics.registerFont(TTFont(font_name, str(font_path)))
                        return True
                    except Exception:
                        logger.debug("Could not register font %s", font_path, exc_info=True)
                        continue
        return False
