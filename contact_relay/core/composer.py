"""
Builds the notification email sent to the site owner.

Every value taken from the request is HTML-escaped before it is placed in
the HTML body. The plain-text body carries the values verbatim.
"""

import html
from datetime import datetime
from typing import Optional
from contact_relay.models.contact import ContactSubmission, EmailMessage

DATE_FORMAT = "%d.%m.%Y %H:%M"

HTML_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <style>
    body {{ font-family: 'Helvetica Neue', Arial, sans-serif; color: #111; background: #f5f5f5; margin: 0; padding: 20px; }}
    .container {{ max-width: 600px; margin: 0 auto; background: #fff; border-radius: 16px; overflow: hidden; box-shadow: 0 4px 24px rgba(0,0,0,0.08); }}
    .header {{ background: #129d63; padding: 30px; text-align: center; }}
    .header h1 {{ color: #fff; margin: 0; font-size: 22px; font-weight: 700; }}
    .content {{ padding: 30px; }}
    .field {{ margin-bottom: 20px; }}
    .field-label {{ font-size: 12px; font-weight: 600; color: #666; text-transform: uppercase; letter-spacing: 1px; margin-bottom: 4px; }}
    .field-value {{ font-size: 16px; color: #111; padding: 12px 16px; background: #f8f8f8; border-radius: 8px; border-left: 3px solid #129d63; }}
    .message-value {{ line-height: 1.6; }}
    .footer {{ padding: 20px 30px; background: #f8f8f8; text-align: center; font-size: 12px; color: #999; }}
  </style>
</head>
<body>
  <div class="container">
    <div class="header">
      <h1>Neue Kontaktanfrage</h1>
    </div>
    <div class="content">
      <div class="field">
        <div class="field-label">Name</div>
        <div class="field-value">{name}</div>
      </div>
      <div class="field">
        <div class="field-label">E-Mail</div>
        <div class="field-value"><a href="mailto:{email}" style="color: #129d63; text-decoration: none;">{email}</a></div>
      </div>
      <div class="field">
        <div class="field-label">Nachricht</div>
        <div class="field-value message-value">{message}</div>
      </div>
    </div>
    <div class="footer">
      Gesendet über {domain} Kontaktformular am {date}<br>
      Datenschutz akzeptiert: Ja{extra}
    </div>
  </div>
</body>
</html>"""


def escape_html(value) -> str:
    """Escape &, <, >, double and single quotes"""
    return html.escape(str(value), quote=True)


def format_timestamp(timestamp: datetime) -> str:
    return timestamp.strftime(DATE_FORMAT)


def format_score(score: float) -> str:
    return f"{score:.1f}"


class MessageComposer:
    """
    Renders submissions into EmailMessage objects.

    Args:
        site_name: Label used in the subject, e.g. "Marknate"
        site_domain: Domain shown in the banner, e.g. "marknate.ch"
        recipient: Address receiving the notification
        sender_email: From address
        sender_name: From display name
    """

    def __init__(self, site_name: str, site_domain: str, recipient: str, sender_email: str, sender_name: str):
        self.site_name = site_name
        self.site_domain = site_domain
        self.recipient = recipient
        self.sender_email = sender_email
        self.sender_name = sender_name

    def subject(self, submission: ContactSubmission) -> str:
        return f"[{self.site_name} Kontaktformular] Neue Anfrage von {submission.full_name}"

    def render_text(self, submission: ContactSubmission, timestamp: datetime,
                    client_ip: Optional[str] = None, bot_score: Optional[float] = None) -> str:
        lines = [
            f"Neue Kontaktanfrage über {self.site_domain}",
            "======================================",
            "",
            f"Name: {submission.full_name}",
            f"E-Mail: {submission.email}",
            "",
            "Nachricht:",
            submission.message,
            "",
            "--------------------------------------",
            f"Gesendet am: {format_timestamp(timestamp)}",
            "Datenschutz akzeptiert: Ja",
        ]
        if client_ip:
            lines.append(f"IP: {client_ip}")
        if bot_score is not None:
            lines.append(f"reCAPTCHA-Score: {format_score(bot_score)}")
        return "\n".join(lines)

    def render_html(self, submission: ContactSubmission, timestamp: datetime,
                    client_ip: Optional[str] = None, bot_score: Optional[float] = None) -> str:
        extra = ""
        if client_ip:
            extra += f" | IP: {escape_html(client_ip)}"
        if bot_score is not None:
            extra += f" | reCAPTCHA-Score: {format_score(bot_score)}"

        message = escape_html(submission.message).replace("\r\n", "\n").replace("\n", "<br>")

        return HTML_TEMPLATE.format(
            name=escape_html(submission.full_name),
            email=escape_html(submission.email),
            message=message,
            domain=escape_html(self.site_domain),
            date=escape_html(format_timestamp(timestamp)),
            extra=extra,
        )

    def compose(self, submission: ContactSubmission, timestamp: datetime,
                client_ip: Optional[str] = None, bot_score: Optional[float] = None) -> EmailMessage:
        return EmailMessage(
            subject=self.subject(submission),
            text=self.render_text(submission, timestamp, client_ip, bot_score),
            html=self.render_html(submission, timestamp, client_ip, bot_score),
            sender_email=self.sender_email,
            sender_name=self.sender_name,
            recipient=self.recipient,
            reply_to_email=submission.email,
            reply_to_name=submission.full_name,
        )
