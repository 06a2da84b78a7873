"""
Email Service using SMTP (preferred) or Resend (fallback)
Provides the notification gateway for proposal and account emails, MJML templates for responsive design
"""

import asyncio
import logging
import smtplib
import ssl
from datetime import datetime
from email import encoders
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import (
    EMAIL_FROM_ADDRESS,
    FRONTEND_URL,
    RESEND_API_KEY,
    SMTP_HOST,
    SMTP_PASS,
    SMTP_PORT,
    SMTP_SECURE,
    SMTP_USER,
)
from .email_templates import account_approved_template, proposal_ready_template
from .services.proposal_pdf_generator import DocumentStorageError, load_proposal_pdf
from .utils.sanitization import sanitize_string

logger = logging.getLogger(__name__)

# Initialize Resend as fallback
resend.api_key = RESEND_API_KEY


class EmailDeliveryError(Exception):
    """Raised when an email could not be handed to any transport"""


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        # mjml_to_html returns a dict-like result with 'html' and 'errors' keys
        if isinstance(result, dict):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        return str(result)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise EmailDeliveryError(f"Failed to compile MJML template: {str(e)}") from e


def send_via_smtp(
    to: list[str],
    subject: str,
    html_content: str,
    from_address: str,
    reply_to: Optional[str] = None,
    attachments: Optional[list[dict]] = None,
) -> dict:
    """Send email via the configured SMTP server"""
    msg = MIMEMultipart("mixed")
    msg["Subject"] = subject
    msg["From"] = from_address
    msg["To"] = ", ".join(to)
    if reply_to:
        msg["Reply-To"] = reply_to

    msg.attach(MIMEText(html_content, "html"))

    for attachment in attachments or []:
        part = MIMEBase("application", "pdf")
        part.set_payload(attachment["content"])
        encoders.encode_base64(part)
        part.add_header("Content-Disposition", f'attachment; filename="{attachment["filename"]}"')
        msg.attach(part)

    if SMTP_SECURE or SMTP_PORT == 465:
        context = ssl.create_default_context()
        server = smtplib.SMTP_SSL(SMTP_HOST, SMTP_PORT, context=context, timeout=30)
    else:
        server = smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=30)
        server.starttls(context=ssl.create_default_context())

    try:
        if SMTP_USER:
            server.login(SMTP_USER, SMTP_PASS or "")
        server.sendmail(from_address.split("<")[-1].rstrip(">"), to, msg.as_string())
    finally:
        server.quit()

    logger.info(f"✅ SMTP email sent successfully via {SMTP_HOST}")
    return {"id": f"smtp-{datetime.utcnow().timestamp()}", "success": True}


def send_via_resend(
    to: list[str],
    subject: str,
    html_content: str,
    from_address: str,
    reply_to: Optional[str] = None,
    attachments: Optional[list[dict]] = None,
) -> dict:
    """Send email via Resend"""
    email_data = {
        "from": from_address,
        "to": to,
        "subject": subject,
        "html": html_content,
    }
    if reply_to:
        email_data["reply_to"] = reply_to
    if attachments:
        email_data["attachments"] = [
            {"filename": attachment["filename"], "content": list(attachment["content"])}
            for attachment in attachments
        ]

    response = resend.Emails.send(email_data)
    logger.info(f"✅ Email sent successfully via Resend: {response}")
    return response


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
    reply_to: Optional[str] = None,
    attachments: Optional[list[dict]] = None,
) -> dict:
    """
    Send an email using SMTP (if configured) or Resend (fallback)

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        from_address: Optional custom from address
        reply_to: Optional Reply-To address
        attachments: Optional list of {"filename", "content": bytes}

    Returns:
        Send response dict

    Raises:
        EmailDeliveryError: if no transport accepted the message
    """
    html_content = compile_mjml_to_html(mjml_content)

    recipients = [to] if isinstance(to, str) else to
    sender = from_address or EMAIL_FROM_ADDRESS

    if SMTP_HOST:
        try:
            logger.info(f"📧 Sending email via SMTP: {SMTP_HOST}")
            return await asyncio.to_thread(
                send_via_smtp, recipients, subject, html_content, sender, reply_to, attachments
            )
        except Exception as e:
            if not RESEND_API_KEY:
                logger.error(f"❌ SMTP send to {recipients} failed: {e}")
                raise EmailDeliveryError(f"Failed to send email: {str(e)}") from e
            logger.warning(f"⚠️ SMTP failed, falling back to Resend: {e}")

    if not RESEND_API_KEY:
        logger.error("❌ No email service configured - RESEND_API_KEY missing and no SMTP host")
        raise EmailDeliveryError("Email service not configured")

    try:
        logger.info(f"📧 Sending email via Resend to: {recipients}")
        return await asyncio.to_thread(
            send_via_resend, recipients, subject, html_content, sender, reply_to, attachments
        )
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise EmailDeliveryError(f"Failed to send email: {str(e)}") from e


# ============================================
# Notification gateway emails
# ============================================


async def send_proposal_notification(
    client_email: str,
    client_name: str,
    agent_email: Optional[str],
    agent_name: str,
    artifact_reference: str,
    proposal_id: int,
    total_amount: Optional[float] = None,
) -> dict:
    """Send the proposal PDF to the client; replies go to the authoring agent"""
    try:
        pdf_bytes = await asyncio.to_thread(load_proposal_pdf, artifact_reference)
    except DocumentStorageError as e:
        logger.error(f"❌ Proposal PDF missing for proposal {proposal_id}: {artifact_reference}")
        raise EmailDeliveryError("The generated proposal PDF could not be found") from e

    mjml_content = proposal_ready_template(
        client_name=sanitize_string(client_name) or "Valued Client",
        agent_name=sanitize_string(agent_name) or "Your account manager",
        proposal_id=proposal_id,
        total_amount=total_amount,
    )
    return await send_email(
        to=client_email,
        subject=f"Your Proposal #{proposal_id}",
        mjml_content=mjml_content,
        reply_to=agent_email,
        attachments=[{"filename": f"Proposal-{proposal_id}.pdf", "content": pdf_bytes}],
    )


async def send_account_approval_notification(email: str, name: str) -> dict:
    """Tell a user their account is active"""
    mjml_content = account_approved_template(
        user_name=sanitize_string(name) or "there", login_url=f"{FRONTEND_URL}/login"
    )
    return await send_email(
        to=email,
        subject="Your Account is Approved!",
        mjml_content=mjml_content,
    )


class EmailNotificationGateway:
    """Notification gateway used by the lifecycle orchestrator and admin service"""

    async def send_proposal_notification(
        self,
        client_email: str,
        client_name: str,
        agent_email: Optional[str],
        agent_name: str,
        artifact_reference: str,
        proposal_id: int,
        total_amount: Optional[float] = None,
    ) -> dict:
        return await send_proposal_notification(
            client_email,
            client_name,
            agent_email,
            agent_name,
            artifact_reference,
            proposal_id,
            total_amount,
        )

    async def send_account_approval_notification(self, email: str, name: str) -> dict:
        return await send_account_approval_notification(email, name)
