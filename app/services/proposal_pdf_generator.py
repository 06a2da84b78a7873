"""
Proposal PDF Generator
Generates branded proposal PDFs (A4, itemised table, total) and stores them locally or in R2
"""

import asyncio
import hashlib
import io
import logging
import time
from datetime import datetime, timedelta
from pathlib import Path

import boto3
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..config import (
    COMPANY_FOOTER,
    COMPANY_NAME,
    PROPOSAL_STORAGE_DIR,
    R2_ACCESS_KEY_ID,
    R2_ACCOUNT_ID,
    R2_BUCKET_NAME,
    R2_SECRET_ACCESS_KEY,
)
from ..utils.sanitization import sanitize_string

logger = logging.getLogger(__name__)

R2_REFERENCE_PREFIX = "r2://"

# Proposals are quoted as valid for two weeks from the issue date
VALIDITY_DAYS = 14


class DocumentStorageError(Exception):
    """Raised when a stored proposal document cannot be written or read"""


def r2_configured() -> bool:
    return all([R2_ACCOUNT_ID, R2_ACCESS_KEY_ID, R2_SECRET_ACCESS_KEY, R2_BUCKET_NAME])


def get_r2_client():
    """Get R2 client"""
    return boto3.client(
        "s3",
        endpoint_url=f"https://{R2_ACCOUNT_ID}.r2.cloudflarestorage.com",
        aws_access_key_id=R2_ACCESS_KEY_ID,
        aws_secret_access_key=R2_SECRET_ACCESS_KEY,
        region_name="auto",
    )


def upload_proposal_pdf_to_r2(pdf_bytes: bytes, file_name: str) -> str:
    """Upload proposal PDF to R2 and return an r2:// reference"""
    key = f"proposals/{file_name}"

    r2 = get_r2_client()
    r2.put_object(
        Bucket=R2_BUCKET_NAME,
        Key=key,
        Body=pdf_bytes,
        ContentType="application/pdf",
    )

    logger.info(f"✅ Uploaded proposal PDF to R2: {key}")
    return f"{R2_REFERENCE_PREFIX}{key}"


def save_proposal_pdf_locally(pdf_bytes: bytes, file_name: str) -> str:
    """Write proposal PDF under the storage directory and return its relative path"""
    storage_dir = Path(PROPOSAL_STORAGE_DIR)
    storage_dir.mkdir(parents=True, exist_ok=True)
    file_path = storage_dir / file_name
    file_path.write_bytes(pdf_bytes)
    logger.info(f"✅ Saved proposal PDF: {file_path}")
    return file_path.as_posix()


def store_proposal_pdf(pdf_bytes: bytes, file_name: str) -> str:
    try:
        if r2_configured():
            return upload_proposal_pdf_to_r2(pdf_bytes, file_name)
        return save_proposal_pdf_locally(pdf_bytes, file_name)
    except Exception as e:
        logger.error(f"❌ Failed to store proposal PDF {file_name}: {e}")
        raise DocumentStorageError(f"Failed to store proposal PDF: {str(e)}") from e


def load_proposal_pdf(artifact_reference: str) -> bytes:
    """Read back the bytes of a stored proposal PDF"""
    try:
        if artifact_reference.startswith(R2_REFERENCE_PREFIX):
            key = artifact_reference[len(R2_REFERENCE_PREFIX):]
            response = get_r2_client().get_object(Bucket=R2_BUCKET_NAME, Key=key)
            return response["Body"].read()
        return Path(artifact_reference).read_bytes()
    except Exception as e:
        raise DocumentStorageError(f"Proposal PDF not available: {artifact_reference}") from e


class ProposalPDFGenerator:
    """Render a proposal as a branded PDF"""

    def __init__(self, proposal_id: int, client_label: str, items: list[dict], total_amount: float):
        self.proposal_id = proposal_id
        self.client_label = sanitize_string(client_label) or "Valued Client"
        self.items = items
        self.total_amount = total_amount

        # PDF settings
        self.page_width, self.page_height = A4
        self.margin = 0.7 * inch

        # Navy / teal palette shared with the email templates
        self.primary_color = colors.HexColor("#0D1B2A")
        self.accent_color = colors.HexColor("#2EC4B6")
        self.dark_text = colors.HexColor("#1E293B")
        self.grey_text = colors.HexColor("#64748B")
        self.table_header_bg = colors.HexColor("#F1F5F9")
        self.border_color = colors.HexColor("#E2E8F0")

    def generate(self) -> bytes:
        """Generate PDF and return bytes"""
        logger.info(f"📄 Generating proposal PDF for proposal {self.proposal_id}")

        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=self.margin,
            leftMargin=self.margin,
            topMargin=self.margin,
            bottomMargin=self.margin,
            title=f"Proposal #{self.proposal_id}",
        )

        styles = getSampleStyleSheet()
        title_style = ParagraphStyle(
            "ProposalTitle",
            parent=styles["Heading1"],
            fontSize=26,
            textColor=self.primary_color,
            spaceAfter=4,
        )
        subtitle_style = ParagraphStyle(
            "ProposalSubtitle",
            parent=styles["Normal"],
            fontSize=10,
            textColor=self.grey_text,
            spaceAfter=12,
        )
        body_style = ParagraphStyle(
            "ProposalBody",
            parent=styles["Normal"],
            fontSize=10,
            textColor=self.dark_text,
            leading=14,
        )

        story = []

        # Header
        story.append(Paragraph(COMPANY_NAME, title_style))
        story.append(Paragraph("Agency Management Portal", subtitle_style))
        story.append(
            Paragraph(
                f"<b>PROPOSAL</b> <font color='#2EC4B6'>#{self.proposal_id}</font>",
                ParagraphStyle("ProposalNumber", parent=body_style, fontSize=16, leading=20),
            )
        )
        story.append(Spacer(1, 0.3 * inch))

        # Prepared-for and dates
        issued = datetime.utcnow()
        info_data = [
            ["PREPARED FOR", "Date Issued:", issued.strftime("%B %d, %Y")],
            [
                Paragraph(f"<b>{self.client_label}</b>", body_style),
                "Valid Until:",
                (issued + timedelta(days=VALIDITY_DAYS)).strftime("%B %d, %Y"),
            ],
            ["", "Project Type:", "Digital Services"],
        ]
        info_table = Table(info_data, colWidths=[3.2 * inch, 1.4 * inch, 1.8 * inch])
        info_table.setStyle(
            TableStyle(
                [
                    ("FONT", (0, 0), (0, 0), "Helvetica-Bold", 9),
                    ("TEXTCOLOR", (0, 0), (0, -1), self.grey_text),
                    ("FONT", (1, 0), (1, -1), "Helvetica", 10),
                    ("TEXTCOLOR", (1, 0), (1, -1), self.grey_text),
                    ("FONT", (2, 0), (2, -1), "Helvetica-Bold", 10),
                    ("TEXTCOLOR", (2, 0), (2, -1), self.dark_text),
                    ("ALIGN", (2, 0), (2, -1), "RIGHT"),
                    ("LINEBEFORE", (0, 0), (0, -1), 3, self.accent_color),
                    ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
                ]
            )
        )
        story.append(info_table)
        story.append(Spacer(1, 0.4 * inch))

        # Line items
        # Descriptions are stored HTML-escaped, which is what Paragraph markup expects
        table_data = [["DESCRIPTION", "AMOUNT"]]
        for item in self.items:
            table_data.append(
                [
                    Paragraph(str(item["description"]), body_style),
                    f"${float(item['price']):,.2f}",
                ]
            )
        table_data.append(["TOTAL", f"${float(self.total_amount):,.2f}"])

        items_table = Table(table_data, colWidths=[5.1 * inch, 1.3 * inch], repeatRows=1)
        items_table.setStyle(
            TableStyle(
                [
                    # Header row
                    ("BACKGROUND", (0, 0), (-1, 0), self.table_header_bg),
                    ("TEXTCOLOR", (0, 0), (-1, 0), self.grey_text),
                    ("FONT", (0, 0), (-1, 0), "Helvetica-Bold", 9),
                    ("TOPPADDING", (0, 0), (-1, 0), 10),
                    ("BOTTOMPADDING", (0, 0), (-1, 0), 10),
                    # Data rows
                    ("FONT", (0, 1), (-1, -2), "Helvetica", 10),
                    ("TEXTCOLOR", (0, 1), (-1, -1), self.dark_text),
                    ("ALIGN", (1, 0), (1, -1), "RIGHT"),
                    ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                    ("LINEBELOW", (0, 0), (-1, -2), 0.5, self.border_color),
                    ("TOPPADDING", (0, 1), (-1, -1), 8),
                    ("BOTTOMPADDING", (0, 1), (-1, -1), 8),
                    # Total row
                    ("BACKGROUND", (0, -1), (-1, -1), self.primary_color),
                    ("TEXTCOLOR", (0, -1), (-1, -1), colors.white),
                    ("FONT", (0, -1), (-1, -1), "Helvetica-Bold", 12),
                ]
            )
        )
        story.append(items_table)

        story.append(Spacer(1, 0.5 * inch))
        story.append(
            Paragraph(
                "<i>Thank you for considering our services. Reply to the delivery email with any questions.</i>",
                ParagraphStyle("Closing", parent=body_style, fontSize=9, textColor=self.grey_text),
            )
        )

        doc.build(story, onFirstPage=self._add_footer, onLaterPages=self._add_footer)

        pdf_bytes = buffer.getvalue()
        buffer.close()

        logger.info(f"✅ Generated proposal PDF ({len(pdf_bytes)} bytes)")
        return pdf_bytes

    def _add_footer(self, canvas_obj, doc):
        """Company contact line and page number on every page"""
        canvas_obj.saveState()
        canvas_obj.setFont("Helvetica", 8)
        canvas_obj.setFillColor(self.grey_text)
        canvas_obj.drawString(self.margin, self.margin / 2, COMPANY_FOOTER)
        canvas_obj.drawRightString(
            self.page_width - self.margin, self.margin / 2, f"Page {canvas_obj.getPageNumber()}"
        )
        canvas_obj.restoreState()

    @staticmethod
    def calculate_hash(pdf_bytes: bytes) -> str:
        """Calculate SHA-256 hash of PDF"""
        return hashlib.sha256(pdf_bytes).hexdigest()


def render_and_store_proposal_pdf(
    proposal_id: int, client_label: str, items: list[dict], total_amount: float
) -> str:
    """Blocking: render the PDF and persist it, returning the artifact reference"""
    pdf_bytes = ProposalPDFGenerator(proposal_id, client_label, items, total_amount).generate()
    file_name = f"proposal-{proposal_id}-{int(time.time() * 1000)}.pdf"
    reference = store_proposal_pdf(pdf_bytes, file_name)
    logger.info(
        f"📄 Proposal {proposal_id} document stored at {reference} "
        f"(sha256 {ProposalPDFGenerator.calculate_hash(pdf_bytes)[:12]})"
    )
    return reference


class ProposalDocumentGenerator:
    """Document generator used by the lifecycle orchestrator"""

    async def generate(
        self, proposal_id: int, client_label: str, items: list[dict], total_amount: float
    ) -> str:
        return await asyncio.to_thread(
            render_and_store_proposal_pdf, proposal_id, client_label, items, total_amount
        )
