from io import BytesIO
from typing import Mapping, Optional

from reportlab.platypus import (
    SimpleDocTemplate,
    Paragraph,
    Spacer,
    Table,
    TableStyle,
)
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.pagesizes import A4
from reportlab.lib.enums import TA_LEFT
from reportlab.lib import colors
from xml.sax.saxutils import escape

from app.core.session_models import DictationSession
from app.models import SoapNote

VITAL_LABELS = {
    "bloodPressure": "Blood Pressure",
    "heartRate": "Heart Rate",
    "temperature": "Temperature",
    "respiratoryRate": "Respiratory Rate",
}


def _render_section(story: list, title: str, rows, section_style, body_style):
    story.append(Paragraph(title, section_style))
    for label, value in rows:
        story.append(Paragraph(f"<b>{escape(label)}:</b> {escape(value or '—')}", body_style))


def _vitals_text(vitals: Mapping[str, str]) -> str:
    if not vitals:
        return "—"
    return ", ".join(f"{VITAL_LABELS.get(k, k)} {v}" for k, v in vitals.items())


def render_soap_pdf(note: SoapNote, session: Optional[DictationSession] = None) -> bytes:
    """Render a SOAP note to PDF bytes. Nothing is written to disk."""
    buffer = BytesIO()
    styles = getSampleStyleSheet()
    story: list = []

    title_style = ParagraphStyle(
        "Title",
        parent=styles["Heading1"],
        alignment=TA_LEFT,
        spaceAfter=12,
    )

    section_style = ParagraphStyle(
        "Section",
        parent=styles["Heading3"],
        spaceBefore=12,
        spaceAfter=6,
    )

    body_style = styles["Normal"]

    # ---------------- TITLE ----------------
    story.append(Paragraph("SOAP NOTE", title_style))
    story.append(Spacer(1, 12))

    # ---------------- SESSION DETAILS ----------------
    rows = [
        ["Generated", note.generated_at],
        ["Confidence", f"{round(note.confidence * 100)}%"],
    ]
    if session is not None:
        rows = [
            ["Doctor", session.doctor_name],
            ["Patient ID", session.patient_id],
            ["Session ID", session.session_id],
        ] + rows

    details = Table(rows, colWidths=[120, 350])
    details.setStyle(
        TableStyle(
            [
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ("BACKGROUND", (0, 0), (0, -1), colors.whitesmoke),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("FONT", (0, 0), (-1, -1), "Helvetica"),
            ]
        )
    )
    story.append(details)
    story.append(Spacer(1, 14))

    # ---------------- SECTIONS ----------------
    _render_section(
        story,
        "Subjective",
        [
            ("Chief Complaint", note.subjective.chief_complaint),
            ("History of Present Illness", note.subjective.history_of_present_illness),
            ("Past Medical History", note.subjective.past_medical_history),
            ("Medications", note.subjective.medications),
        ],
        section_style,
        body_style,
    )

    _render_section(
        story,
        "Objective",
        [
            ("Vital Signs", _vitals_text(note.objective.vital_signs)),
            ("Physical Examination", note.objective.physical_examination),
        ],
        section_style,
        body_style,
    )

    _render_section(
        story,
        "Assessment",
        [
            ("Primary Diagnosis", note.assessment.primary_diagnosis),
            ("Secondary Diagnoses", note.assessment.secondary_diagnoses),
        ],
        section_style,
        body_style,
    )

    _render_section(
        story,
        "Plan",
        [
            ("Immediate Actions", note.plan.immediate_actions),
            ("Procedures", note.plan.procedures),
        ],
        section_style,
        body_style,
    )

    if note.medical_terms_found:
        story.append(Paragraph("Medical Terms", section_style))
        story.append(Paragraph(escape(", ".join(note.medical_terms_found)), body_style))

    # ---------------- FOOTER ----------------
    story.append(Spacer(1, 20))
    story.append(
        Paragraph(
            "Keyword-generated demo note, Doctor verification required.",
            styles["Italic"],
        )
    )

    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=36,
        leftMargin=36,
        topMargin=36,
        bottomMargin=36,
    )

    doc.build(story)
    return buffer.getvalue()
