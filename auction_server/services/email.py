# Copyright (C) 2024 Auction Platform Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Email sending service. Logs to console when SMTP not configured."""

import asyncio
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from auction_server.config import settings

logger = logging.getLogger(__name__)


def wrap_body_html(plain_body: str) -> str:
    """Wrap plain text body in minimal HTML."""
    body_escaped = plain_body.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace("\n", "<br>\n")
    return f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"></head>
<body style="font-family: system-ui, sans-serif; color: #333; max-width: 560px;">
<div style="white-space: pre-wrap;">{body_escaped}</div>
</body>
</html>"""


def _build_message(to: str, subject: str, body: str) -> MIMEMultipart:
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = settings.smtp_from
    msg["To"] = to
    msg.attach(MIMEText(body, "plain"))
    msg.attach(MIMEText(wrap_body_html(body), "html"))
    return msg


def _smtp_send(to: str, msg: MIMEMultipart) -> None:
    with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as server:
        server.starttls()
        server.login(settings.smtp_user, settings.smtp_password or "")
        server.sendmail(settings.smtp_from, [to], msg.as_string())


async def send_email(to: str, subject: str, body: str) -> None:
    """Send an email (plain and HTML). Logs instead when SMTP is not configured.
    SMTP errors propagate to the caller."""
    if not (settings.smtp_host and settings.smtp_user):
        logger.info("Email (SMTP not configured): To=%s Subject=%s", to, subject)
        return
    await asyncio.to_thread(_smtp_send, to, _build_message(to, subject, body))


async def send_otp_email(email: str, otp: str) -> None:
    """Notification channel for login OTPs."""
    await send_email(
        email,
        "Your login code",
        f"Your one-time login code is: {otp}\n\n"
        f"It expires in {settings.otp_expire_minutes} minutes. "
        "If you did not try to sign in, you can ignore this email.",
    )
