"""
Email service for sending survey results links.

This module provides email functionality using SMTP configuration from settings.
In development/testing environments without SMTP configured, it logs the link
instead of sending an actual email.
"""
import logging
import smtplib
from datetime import timedelta
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from email.utils import formataddr

from app.core.config import settings
from app.core.datetime_utils import utc_now

# SMTP connection timeout in seconds
SMTP_TIMEOUT_SECONDS = 10

RESULTS_LINK_SUBJECT = "Your UpskillABA Survey Results"

logger = logging.getLogger(__name__)

RESULTS_LINK_HTML_TEMPLATE = """
<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Your Survey Results</title>
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Helvetica, Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <div style="background-color: #f3f4f6; border-radius: 8px; padding: 30px; margin-bottom: 20px;">
        <h1 style="color: #1a1a1a; margin-top: 0;">Your Survey Results</h1>
        <p style="font-size: 16px; margin-bottom: 20px;">
            Thanks for completing the Quick Quality Assessment.
        </p>
        <p style="font-size: 16px; margin-bottom: 20px;">
            Use the button below to view your results. This link expires in {expires_in}.
        </p>
        <div style="text-align: center; margin: 30px 0;">
            <a href="{results_url}" style="background-color: #0d9488; color: white; padding: 14px 28px; text-decoration: none; border-radius: 8px; display: inline-block; font-weight: 600; font-size: 16px;">
                View My Results
            </a>
        </div>
        <p style="font-size: 14px; color: #666; margin-top: 30px;">
            If the button above doesn't work, copy and paste this link into your browser:
        </p>
        <p style="font-size: 14px; color: #0d9488; word-break: break-all;">
            {results_url}
        </p>
    </div>
    <div style="font-size: 12px; color: #999; text-align: center; margin-top: 20px;">
        <p>If you didn't request this email, you can safely ignore it.</p>
        <p>&copy; {year} UpskillABA. All rights reserved.</p>
    </div>
</body>
</html>
"""

RESULTS_LINK_TEXT_TEMPLATE = """
Your Survey Results

Thanks for completing the Quick Quality Assessment.

Open the link below to view your results. This link expires in {expires_in}:

{results_url}

If you didn't request this email, you can safely ignore it.

---
(c) {year} UpskillABA. All rights reserved.
"""


def _is_smtp_configured() -> bool:
    """
    Check if SMTP is properly configured.

    Returns:
        True if all required SMTP settings are configured, False otherwise.
    """
    return bool(
        settings.SMTP_HOST
        and settings.SMTP_PORT
        and settings.SMTP_USERNAME
        and settings.SMTP_PASSWORD
        and settings.SMTP_FROM_EMAIL
    )


def build_results_url(token: str, base_url: str = "") -> str:
    """Public results page URL for a magic-link token."""
    base = (base_url or settings.APP_URL).rstrip("/")
    return f"{base}/results/{token}"


def describe_lifetime(lifetime: timedelta) -> str:
    """
    Human-readable link lifetime for email copy.

    Example:
        >>> describe_lifetime(timedelta(days=7))
        '7 days'
    """
    seconds = int(lifetime.total_seconds())
    for unit_seconds, unit in ((86400, "day"), (3600, "hour"), (60, "minute")):
        if seconds >= unit_seconds and seconds % unit_seconds == 0:
            count = seconds // unit_seconds
            return f"{count} {unit}{'s' if count != 1 else ''}"
    return f"{seconds} second{'s' if seconds != 1 else ''}"


def send_results_link_email(
    email: str,
    results_url: str,
    lifetime: timedelta,
) -> bool:
    """
    Send the magic link to a respondent's stored results.

    In production environments with SMTP configured, sends an actual email.
    In development/testing without SMTP, logs the link for manual testing.
    Blocking; scheduled as a background task it runs in the worker threadpool.

    Args:
        email: Recipient email address
        results_url: Results page URL embedding the magic-link token
        lifetime: How long the link stays valid (shown in the email copy)

    Returns:
        True if email was sent successfully or logged, False on error
    """
    expires_in = describe_lifetime(lifetime)

    if not _is_smtp_configured():
        logger.info(f"SMTP not configured. Results link requested for {email}.")
        logger.info(f"Results URL (for testing): {results_url}")
        return True

    try:
        current_year = utc_now().year

        msg = MIMEMultipart("alternative")
        msg["Subject"] = RESULTS_LINK_SUBJECT
        msg["From"] = formataddr((settings.SMTP_FROM_NAME, settings.SMTP_FROM_EMAIL))
        # Properly encode recipient to prevent header injection
        msg["To"] = formataddr(("", email))

        text_content = RESULTS_LINK_TEXT_TEMPLATE.format(
            results_url=results_url, expires_in=expires_in, year=current_year
        )
        html_content = RESULTS_LINK_HTML_TEMPLATE.format(
            results_url=results_url, expires_in=expires_in, year=current_year
        )
        msg.attach(MIMEText(text_content, "plain"))
        msg.attach(MIMEText(html_content, "html"))

        with smtplib.SMTP(
            settings.SMTP_HOST, settings.SMTP_PORT, timeout=SMTP_TIMEOUT_SECONDS
        ) as server:
            server.starttls()  # Upgrade to secure connection
            server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            server.send_message(msg)

        logger.info(f"Results link email sent successfully to {email}")
        return True

    except smtplib.SMTPException as e:
        logger.error(f"SMTP error sending results link email to {email}: {e}")
        return False
    except OSError as e:
        logger.error(
            f"Connection error sending results link email to {email}: {e}",
            exc_info=True,
        )
        return False
