"""Email service using Resend for sending transactional emails."""

from __future__ import annotations

import html
import logging
from typing import Any
from urllib.parse import quote

import resend

from ..settings import Settings

logger = logging.getLogger(__name__)

NEWSLETTER_SENDER = "TMNG Weekly Digest"
CONTACT_SENDER = "TMNG"

_STYLE = """
    body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; background: #0f0f0f; color: #e5e5e5; padding: 40px; }
    .container { max-width: 600px; margin: 0 auto; background: linear-gradient(135deg, #1a1a2e 0%, #16213e 100%); border-radius: 16px; padding: 40px; border: 1px solid rgba(139, 92, 246, 0.2); }
    h1 { color: #e879f9; margin: 0 0 16px 0; font-size: 26px; }
    p { color: #c4b5fd; font-size: 16px; line-height: 1.6; }
    .label { color: #a78bfa; font-size: 12px; text-transform: uppercase; letter-spacing: 0.5px; margin-bottom: 4px; }
    .value { color: #f5f5f5; font-size: 16px; line-height: 1.6; margin-bottom: 20px; }
    .button { display: inline-block; background: linear-gradient(135deg, #e879f9 0%, #8b5cf6 100%); color: #fff !important; text-decoration: none; padding: 16px 40px; border-radius: 12px; font-weight: 600; }
    .footer { margin-top: 32px; padding-top: 24px; border-top: 1px solid rgba(255,255,255,0.1); color: #888; font-size: 12px; }
"""


def _init_resend(settings: Settings) -> bool:
    """Initialize Resend API key. Returns True if configured."""
    if not settings.resend_api_key:
        logger.warning("RESEND_API_KEY not configured - email sending disabled")
        return False
    resend.api_key = settings.resend_api_key
    return True


def _page(title: str, body: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>{title}</title>
  <style>{_STYLE}</style>
</head>
<body>
  <div class="container">
{body}
  </div>
</body>
</html>"""


def _send(
    settings: Settings,
    *,
    to_email: str,
    subject: str,
    html_content: str,
    text_content: str,
    sender_name: str,
    reply_to: str | None = None,
    kind: str,
) -> dict[str, Any] | None:
    if not _init_resend(settings):
        logger.info(f"Email sending disabled - would send {kind} to {to_email}")
        return None

    try:
        params: resend.Emails.SendParams = {
            "from": f"{sender_name} <{settings.mail_from}>",
            "to": [to_email],
            "subject": subject,
            "html": html_content,
            "text": text_content,
        }
        if reply_to:
            params["reply_to"] = reply_to

        response = resend.Emails.send(params)
        logger.info(f"{kind.capitalize()} email sent to {to_email}, id: {response.get('id', 'unknown')}")
        return response
    except Exception as e:
        logger.error(f"Failed to send {kind} email to {to_email}: {e}")
        return None


def confirm_url(settings: Settings, token: str) -> str:
    return f"{settings.site_url}/api/subscribers/confirm/{token}"


def unsubscribe_url(settings: Settings, email: str) -> str:
    return f"{settings.site_url}/api/subscribers/unsubscribe?email={quote(email)}"


def send_newsletter_confirmation_email(
    settings: Settings,
    to_email: str,
    token: str,
    first_name: str | None = None,
) -> dict[str, Any] | None:
    """
    Ask a new (or returning) subscriber to confirm their address.

    Returns:
        Resend API response if successful, None if email sending is disabled or fails
    """
    url = confirm_url(settings, token)
    greeting = f"Hi {html.escape(first_name)}" if first_name else "Hi there"

    html_content = _page(
        "Confirm your subscription",
        f"""    <h1>Almost there!</h1>
    <p>{greeting}, thanks for subscribing to the TMNG Weekly Digest. Click the button below to confirm your email address.</p>
    <p style="text-align: center;"><a href="{url}" class="button">Confirm Subscription</a></p>
    <div class="footer">If you didn't subscribe, you can safely ignore this email.</div>""",
    )
    text_content = f"""{greeting},

Thanks for subscribing to the TMNG Weekly Digest!

Confirm your subscription by opening this link:
{url}

If you didn't subscribe, you can safely ignore this email.
"""
    return _send(
        settings,
        to_email=to_email,
        subject="Confirm your subscription to TMNG Weekly Digest",
        html_content=html_content,
        text_content=text_content,
        sender_name=NEWSLETTER_SENDER,
        kind="newsletter confirmation",
    )


def send_newsletter_welcome_email(
    settings: Settings,
    to_email: str,
    first_name: str | None = None,
) -> dict[str, Any] | None:
    """Sent once, right after a subscription is confirmed."""
    url = unsubscribe_url(settings, to_email)
    greeting = f"Hi {html.escape(first_name)}" if first_name else "Hi there"

    html_content = _page(
        "Welcome to TMNG Weekly Digest",
        f"""    <h1>You're in!</h1>
    <p>{greeting}, your subscription is confirmed. Expect the TMNG Weekly Digest in your inbox every week.</p>
    <p style="text-align: center;"><a href="{settings.site_url}/blog" class="button">Read the Blog</a></p>
    <div class="footer">Don't want these emails? <a href="{url}">Unsubscribe</a></div>""",
    )
    text_content = f"""{greeting},

Your subscription to the TMNG Weekly Digest is confirmed.

Read the blog: {settings.site_url}/blog

Unsubscribe: {url}
"""
    return _send(
        settings,
        to_email=to_email,
        subject="Welcome to TMNG Weekly Digest",
        html_content=html_content,
        text_content=text_content,
        sender_name=NEWSLETTER_SENDER,
        kind="newsletter welcome",
    )


def send_contact_notification_email(
    settings: Settings,
    *,
    name: str,
    email: str,
    subject: str,
    message: str,
) -> dict[str, Any] | None:
    """Forward a contact form submission to the site owner; replies go to the sender."""
    safe_message = html.escape(message).replace("\n", "<br>")

    html_content = _page(
        "New Contact Submission",
        f"""    <h1>New Contact Submission</h1>
    <div class="label">From</div>
    <div class="value">{html.escape(name)} &lt;{html.escape(email)}&gt;</div>
    <div class="label">Subject</div>
    <div class="value">{html.escape(subject)}</div>
    <div class="label">Message</div>
    <div class="value">{safe_message}</div>
    <div class="footer">Reply directly to this email to respond to {html.escape(name)}.</div>""",
    )
    text_content = f"""New Contact Submission
======================

From: {name} <{email}>
Subject: {subject}

Message:
{message}

---
Reply to this email to respond.
"""
    return _send(
        settings,
        to_email=settings.mail_to,
        subject=f"[TMNG Contact] {subject}",
        html_content=html_content,
        text_content=text_content,
        sender_name=CONTACT_SENDER,
        reply_to=email,
        kind="contact notification",
    )
