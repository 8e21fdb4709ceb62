"""
PDF rendering for letters and personnel action forms.
"""
import io
from datetime import datetime
from html import escape
from typing import List, Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from ..models.models import Letter, PafSubmission, PafApprovalStep


_styles = getSampleStyleSheet()
TITLE = ParagraphStyle("DistrictTitle", parent=_styles["Title"], fontName="Helvetica-Bold", fontSize=16, spaceAfter=12)
BODY = ParagraphStyle("DistrictBody", parent=_styles["BodyText"], fontName="Helvetica", fontSize=11, leading=15)
SMALL = ParagraphStyle("DistrictSmall", parent=BODY, fontSize=8, textColor=colors.grey)


def _build(story: list, title: str) -> bytes:
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=LETTER,
        leftMargin=inch,
        rightMargin=inch,
        topMargin=inch,
        bottomMargin=inch,
        title=title,
    )
    doc.build(story)
    return buf.getvalue()


def _paragraphs(text: str) -> list:
    """One Paragraph per blank-line separated block; single newlines become line breaks."""
    out = []
    for block in (text or "").split("\n\n"):
        block = block.strip()
        if not block:
            continue
        out.append(Paragraph(escape(block).replace("\n", "<br/>"), BODY))
        out.append(Spacer(1, 8))
    return out


def _fmt(value) -> str:
    if value is None or value == "":
        return "-"
    if isinstance(value, datetime):
        return value.strftime("%m/%d/%Y %H:%M")
    if hasattr(value, "strftime"):
        return value.strftime("%m/%d/%Y")
    return str(value)


def render_letter_pdf(letter: Letter) -> bytes:
    content = letter.processed_content or letter.template_content
    story = [Paragraph(escape(letter.title), TITLE)]
    story.extend(_paragraphs(content))
    if letter.status == "draft":
        story.append(Spacer(1, 24))
        story.append(Paragraph("DRAFT - placeholders not yet filled", SMALL))
    return _build(story, letter.title)


def render_paf_pdf(submission: PafSubmission, steps: List[PafApprovalStep]) -> bytes:
    story = [
        Paragraph("Personnel Action Form", TITLE),
        Paragraph(f"Submission #{submission.id} - status: {escape(submission.status)}", SMALL),
        Spacer(1, 12),
    ]
    fields = [
        ("PAF Type", submission.paf_type),
        ("Position Title", submission.position_title),
        ("Position Type", submission.position_type),
        ("Position Category", submission.position_category),
        ("Employee", submission.employee_name),
        ("Effective Date", submission.effective_date),
        ("Reason", submission.reason),
    ]
    table = Table([[k, _fmt(v)] for k, v in fields], colWidths=[1.8 * inch, 4.7 * inch])
    table.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 10),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.lightgrey),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ]))
    story.extend([table, Spacer(1, 14), Paragraph("Justification", _styles["Heading3"])])
    story.extend(_paragraphs(submission.justification))

    if steps:
        story.append(Paragraph("Approvals", _styles["Heading3"]))
        rows = [["Step", "Approver", "Status", "Signed", "Comments"]]
        for s in steps:
            rows.append([
                str(s.step),
                s.approver_role.replace("_", " ").title(),
                s.status,
                _fmt(s.signed_at),
                s.comments or "",
            ])
        approvals = Table(rows, colWidths=[0.5 * inch, 1.6 * inch, 0.9 * inch, 1.4 * inch, 2.1 * inch])
        approvals.setStyle(TableStyle([
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#f1f3f5")),
            ("FONTSIZE", (0, 0), (-1, -1), 9),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.lightgrey),
        ]))
        story.append(approvals)
    return _build(story, f"PAF {submission.id}")


def pdf_filename(prefix: str, obj_id: int, suffix: Optional[str] = None) -> str:
    name = f"{prefix}-{obj_id}"
    if suffix:
        name = f"{name}-{suffix}"
    return f"{name}.pdf"
