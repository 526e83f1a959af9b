"""TSD document rendering for dchangelog."""

import io
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Union
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .config import DocumentConfig
from .diffpack import DiffProcessor, LineKind, ProcessedDiff
from .errors import RenderError
from .fileio import write_atomically
from .vcs import ChangeSet

logger = logging.getLogger(__name__)

DOCUMENT_TITLE = "Technical Specification Document (TSD)"
NO_CHANGES_MESSAGE = "No changes detected"
NO_TEXTUAL_DIFF_MESSAGE = "No textual diff available"
QUERY_CHANGES_PLACEHOLDER = "Not yet populated"
SIGNATURE_PLACEHOLDER = "[Signed]"

OUTPUT_PREFIX = "tsd_"
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"

PAGE_MARGIN = 12 * mm
CONTENT_WIDTH = 180 * mm

ADDITION_COLOR = colors.HexColor("#008000")
DELETION_COLOR = colors.HexColor("#FF0000")
DEFAULT_COLOR = colors.black

LINE_COLORS = {
    LineKind.ADDITION: ADDITION_COLOR,
    LineKind.DELETION: DELETION_COLOR,
    LineKind.CONTEXT: DEFAULT_COLOR,
}

DIFF_FONT_SIZE = 8
DIFF_CELL_PADDING = 4
TAB_WIDTH = 4
# Courier glyphs are 0.6 em wide
DIFF_LINE_CHARS = int((CONTENT_WIDTH - 2 * DIFF_CELL_PADDING) / (DIFF_FONT_SIZE * 0.6))


def build_output_filename(now: datetime) -> str:
    """Return the time-stamped output file name, e.g. tsd_20240131_154502.pdf."""
    return f"{OUTPUT_PREFIX}{now.strftime(TIMESTAMP_FORMAT)}.pdf"


def next_output_path(output_dir: Union[str, Path], now: datetime) -> Path:
    """Return a path in output_dir that no earlier run has used."""
    output_dir = Path(output_dir)
    candidate = output_dir / build_output_filename(now)
    counter = 2
    while candidate.exists():
        candidate = output_dir / (
            f"{OUTPUT_PREFIX}{now.strftime(TIMESTAMP_FORMAT)}_{counter}.pdf"
        )
        counter += 1
    return candidate


def _wrap_code(text: str) -> List[str]:
    """Hard-wrap a code line into chunks that fit one table row."""
    text = text.expandtabs(TAB_WIDTH)
    if not text:
        return [""]
    return [text[i:i + DIFF_LINE_CHARS] for i in range(0, len(text), DIFF_LINE_CHARS)]


def _code_markup(text: str) -> str:
    """Escape a code chunk for Paragraph markup, keeping its spacing."""
    return escape(text).replace(" ", "&nbsp;") or "&nbsp;"


def _build_styles() -> Dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()["Normal"]
    styles = {
        "title": ParagraphStyle(
            "TsdTitle", parent=base, fontName="Helvetica-Bold",
            fontSize=16, leading=20, spaceAfter=8,
        ),
        "issue_title": ParagraphStyle(
            "TsdIssueTitle", parent=base, fontName="Helvetica-Bold",
            fontSize=14, leading=18, spaceAfter=2,
        ),
        "body": ParagraphStyle(
            "TsdBody", parent=base, fontName="Helvetica", fontSize=11, leading=15,
        ),
        "heading": ParagraphStyle(
            "TsdHeading", parent=base, fontName="Helvetica-Bold",
            fontSize=14, leading=18, spaceBefore=10, spaceAfter=6,
        ),
        "cell_header": ParagraphStyle(
            "TsdCellHeader", parent=base, fontName="Helvetica-Bold",
            fontSize=11, leading=14, alignment=TA_CENTER,
        ),
        "cell": ParagraphStyle(
            "TsdCell", parent=base, fontName="Helvetica",
            fontSize=11, leading=14, alignment=TA_CENTER,
        ),
        "file_header": ParagraphStyle(
            "TsdFileHeader", parent=base, fontName="Helvetica-Bold",
            fontSize=11, leading=14, alignment=TA_LEFT,
        ),
        "note": ParagraphStyle(
            "TsdNote", parent=base, fontName="Helvetica-Oblique",
            fontSize=10, leading=13, alignment=TA_LEFT, textColor=DEFAULT_COLOR,
        ),
        "summary": ParagraphStyle(
            "TsdSummary", parent=base, fontName="Helvetica",
            fontSize=10, leading=13, spaceBefore=4, spaceAfter=4,
        ),
    }
    for kind, color in LINE_COLORS.items():
        styles[f"diff_{kind.value}"] = ParagraphStyle(
            f"TsdDiff{kind.value.title()}", parent=base, fontName="Courier",
            fontSize=DIFF_FONT_SIZE, leading=DIFF_FONT_SIZE + 2, textColor=color,
        )
    return styles


class TsdDocumentBuilder:
    """Builds the TSD story section by section.

    Diff line color is explicit builder state: ``set_style`` changes it,
    ``reset_style`` brings it back to the default, and every file block
    and the Code Changes section end with a reset.
    """

    def __init__(self, config: DocumentConfig, processor: Optional[DiffProcessor] = None):
        self.config = config
        self.processor = processor or DiffProcessor()
        self.styles = _build_styles()
        self.story: List = []
        self._line_kind = LineKind.CONTEXT

    @property
    def current_style(self) -> LineKind:
        return self._line_kind

    def set_style(self, kind: LineKind) -> None:
        self._line_kind = kind

    def reset_style(self) -> None:
        self._line_kind = LineKind.CONTEXT

    def _paragraph(self, text: str, style: str) -> Paragraph:
        return Paragraph(escape(text), self.styles[style])

    def _diff_paragraph(self, chunk: str) -> Paragraph:
        return Paragraph(_code_markup(chunk), self.styles[f"diff_{self._line_kind.value}"])

    def _boxed(self, content: Paragraph, height: Optional[float] = None) -> Table:
        table = Table(
            [[content]],
            colWidths=[CONTENT_WIDTH],
            rowHeights=[height] if height else None,
        )
        table.setStyle(TableStyle([
            ("BOX", (0, 0), (-1, -1), 0.5, colors.black),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ]))
        return table

    def add_title_block(self) -> None:
        jira = self.config.jira
        self.story.append(self._paragraph(DOCUMENT_TITLE, "title"))
        if jira.title:
            self.story.append(self._paragraph(jira.title, "issue_title"))
        if jira.link:
            self.story.append(self._paragraph(f"Link JIRA: {jira.link}", "body"))
        if self.config.pr.link:
            self.story.append(self._paragraph(f"Link PR: {self.config.pr.link}", "body"))
        if jira.description:
            self.story.append(
                self._paragraph(f"Task Description: {jira.description}", "body")
            )
        self.story.append(Spacer(1, 8 * mm))

    def add_metadata_table(self) -> None:
        config = self.config
        rows = [
            [
                self._paragraph(config.developer.title, "cell_header"),
                self._paragraph(config.project.title, "cell_header"),
                self._paragraph("Status", "cell_header"),
            ],
            [
                self._paragraph(config.developer.name, "cell"),
                self._paragraph(config.project.value, "cell"),
                self._paragraph(config.status.title, "cell"),
            ],
        ]
        table = Table(rows, colWidths=[CONTENT_WIDTH / 3] * 3)
        table.setStyle(TableStyle([
            ("GRID", (0, 0), (-1, -1), 0.5, colors.black),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("TOPPADDING", (0, 0), (-1, -1), 6),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
        ]))
        self.story.append(table)
        self.story.append(Spacer(1, 6 * mm))

    def add_code_changes(self, change_set: ChangeSet) -> None:
        self.story.append(self._paragraph("Code Changes", "heading"))
        self.story.append(self._boxed(self._paragraph("File Changes", "cell_header")))

        if change_set.is_empty:
            self.story.append(self._boxed(self._paragraph(NO_CHANGES_MESSAGE, "note")))
            self.reset_style()
            return

        diffs = [self.processor.process(path, diff) for path, diff in change_set]
        added = sum(d.added for d in diffs)
        deleted = sum(d.deleted for d in diffs)
        self.story.append(self._paragraph(
            f"{len(diffs)} file(s) changed, {added} addition(s), {deleted} deletion(s)",
            "summary",
        ))

        for diff in diffs:
            self.add_file_block(diff)
            self.story.append(Spacer(1, 3 * mm))
        self.reset_style()

    def add_file_block(self, diff: ProcessedDiff) -> None:
        header = f"Filename: {diff.path}"
        if diff.is_binary:
            header += " (binary)"
        rows = [[self._paragraph(header, "file_header")]]

        self.reset_style()
        if diff.is_empty:
            rows.append([self._paragraph(NO_TEXTUAL_DIFF_MESSAGE, "note")])
        for line in diff.lines:
            self.set_style(line.kind)
            for chunk in _wrap_code(line.text):
                rows.append([self._diff_paragraph(chunk)])
        self.reset_style()

        table = Table(rows, colWidths=[CONTENT_WIDTH], repeatRows=1)
        table.setStyle(TableStyle([
            ("BOX", (0, 0), (-1, -1), 0.5, colors.black),
            ("LINEBELOW", (0, 0), (-1, 0), 0.5, colors.black),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("LEFTPADDING", (0, 0), (-1, -1), DIFF_CELL_PADDING),
            ("RIGHTPADDING", (0, 0), (-1, -1), DIFF_CELL_PADDING),
            ("TOPPADDING", (0, 0), (-1, 0), 5),
            ("BOTTOMPADDING", (0, 0), (-1, 0), 5),
            ("TOPPADDING", (0, 1), (-1, -1), 0),
            ("BOTTOMPADDING", (0, 1), (-1, -1), 0),
        ]))
        self.story.append(table)

    def add_query_changes(self) -> None:
        # Static section: there is no data source for queries yet.
        self.story.append(self._paragraph("Query Changes", "heading"))
        self.story.append(
            self._boxed(self._paragraph(QUERY_CHANGES_PLACEHOLDER, "note"), height=30 * mm)
        )

    def add_sign_approval(self) -> None:
        sign = self.config.sign_approval
        self.story.append(self._paragraph("Sign Approval", "heading"))
        rows = [
            [
                self._paragraph(f"Role: {sign.role}", "cell"),
                self._paragraph(f"Name: {sign.name}", "cell"),
            ],
            [self._paragraph(f"Signature: {SIGNATURE_PLACEHOLDER}", "cell"), ""],
        ]
        table = Table(
            rows,
            colWidths=[CONTENT_WIDTH / 2] * 2,
            rowHeights=[10 * mm, 20 * mm],
        )
        table.setStyle(TableStyle([
            ("GRID", (0, 0), (-1, -1), 0.5, colors.black),
            ("SPAN", (0, 1), (1, 1)),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ]))
        self.story.append(table)

    def build(self, change_set: ChangeSet) -> None:
        """Lay out every section in document order."""
        self.add_title_block()
        self.add_metadata_table()
        self.add_code_changes(change_set)
        self.add_query_changes()
        self.add_sign_approval()

    def to_pdf_bytes(self, subject: str = "") -> bytes:
        """Render the story into PDF bytes."""
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=PAGE_MARGIN,
            rightMargin=PAGE_MARGIN,
            topMargin=PAGE_MARGIN,
            bottomMargin=PAGE_MARGIN,
            title=DOCUMENT_TITLE,
            author=self.config.developer.name,
            subject=subject,
            creator="dchangelog",
        )
        # reportlab consumes the flowables it lays out
        doc.build(list(self.story))
        return buffer.getvalue()


def render_document(
    config: DocumentConfig,
    change_set: ChangeSet,
    output_dir: Union[str, Path] = ".",
    now: Optional[datetime] = None,
) -> Path:
    """Render a ChangeSet into a new time-stamped TSD PDF and return its path."""
    output_dir = Path(output_dir)
    builder = TsdDocumentBuilder(config)

    try:
        builder.build(change_set)
        data = builder.to_pdf_bytes(subject=change_set.revision_range)
    except Exception as e:
        raise RenderError(str(output_dir), f"{type(e).__name__}: {e}") from e

    output_path = next_output_path(output_dir, now or datetime.now())
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        write_atomically(data, output_path)
    except OSError as e:
        raise RenderError(str(output_path), str(e)) from e

    logger.info(
        "TSD written",
        extra={"output": str(output_path), "files": len(change_set), "bytes": len(data)},
    )
    return output_path
