"""
MJML Email Templates
All email templates using MJML for responsive, cross-client compatibility
"""

from typing import Optional

from .config import COMPANY_FOOTER, COMPANY_NAME

# Portal theme colors - Navy/Teal color scheme
THEME = {
    "primary": "#2EC4B6",
    "primary_dark": "#0D1B2A",
    "background": "#F8FAFC",
    "card_bg": "#ffffff",
    "text_primary": "#1E293B",
    "text_secondary": "#334155",
    "text_muted": "#64748B",
    "border": "#E2E8F0",
}


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="Arial, 'Helvetica Neue', sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="{THEME['primary_dark']}" padding="28px 20px">
          <mj-column>
            <mj-text font-size="24px" font-weight="700" color="#ffffff" padding="0">
              {COMPANY_NAME}
            </mj-text>
          </mj-column>
        </mj-section>

        <mj-section background-color="{THEME['card_bg']}" padding="40px 40px 48px 40px">
          <mj-column>
            <mj-text font-size="22px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              {COMPANY_FOOTER}
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def proposal_ready_template(
    client_name: str,
    agent_name: str,
    proposal_id: int,
    total_amount: Optional[float] = None,
) -> str:
    """Proposal delivered to the client, PDF attached"""
    amount_section = ""
    if total_amount:
        amount_section = f"""
        <mj-text align="center" font-size="32px" font-weight="700" color="{THEME['text_primary']}" padding="20px 0">
          ${total_amount:,.2f}
        </mj-text>
        """

    content = f"""
    <mj-text>
      Hello {client_name},
    </mj-text>

    <mj-text>
      Please find attached your project proposal <strong>#{proposal_id}</strong> prepared by <strong>{agent_name}</strong>.
    </mj-text>

    {amount_section}

    <mj-text>
      Review the proposal and feel free to reply to this email if you have any questions.
    </mj-text>

    <mj-text padding="24px 0 0 0">
      Best regards,<br />
      <strong>{agent_name}</strong><br />
      {COMPANY_NAME} Team
    </mj-text>
    """

    return get_base_template(
        title="Your Project Proposal is Ready",
        preview_text=f"Proposal #{proposal_id} from {agent_name}",
        content_sections=content,
    )


def account_approved_template(user_name: str, login_url: str) -> str:
    """Account approval notification"""
    content = f"""
    <mj-text>
      Hello {user_name},
    </mj-text>

    <mj-text>
      Great news! Your account has been approved by our administrators.
    </mj-text>

    <mj-text>
      You can now login to your dashboard to view services and submit requests.
    </mj-text>
    """

    return get_base_template(
        title=f"Your {COMPANY_NAME} Account is Approved!",
        preview_text="Your account is ready to use",
        content_sections=content,
        cta_url=login_url,
        cta_label="Go to Dashboard",
    )
