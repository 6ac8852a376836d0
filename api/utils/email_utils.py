import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from functools import lru_cache
from typing import Any, Dict, Optional

from fastapi.concurrency import run_in_threadpool
from jinja2 import Environment, FileSystemLoader, select_autoescape

from config.settings import get_settings
from utils.logging import get_logger

logger = get_logger(__name__)


class EmailNotConfiguredError(RuntimeError):
    """SMTP credentials are missing"""


@lru_cache()
def _template_env(templates_dir: str) -> Environment:
    return Environment(
        loader=FileSystemLoader(templates_dir),
        autoescape=select_autoescape(["html", "j2"]),
    )


def render_template(template_name: str, context: Dict[str, Any]) -> str:
    settings = get_settings()
    template = _template_env(settings.EMAIL_TEMPLATES_DIR).get_template(template_name)
    return template.render(app_name=settings.EMAIL_FROM_NAME, **context)


def _build_message(recipient_email: str, subject: str, html_body: str, text_body: Optional[str]) -> MIMEMultipart:
    settings = get_settings()
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = formataddr((settings.EMAIL_FROM_NAME, settings.EMAIL_FROM))
    msg["To"] = recipient_email
    if text_body:
        msg.attach(MIMEText(text_body, "plain"))
    msg.attach(MIMEText(html_body, "html"))
    return msg


def _send_smtp(recipient_email: str, msg: MIMEMultipart) -> None:
    settings = get_settings()
    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=settings.NOTIFICATION_TIMEOUT_SECONDS) as server:
        if settings.SMTP_TLS:
            server.starttls()
        server.login(settings.SMTP_USER, settings.SMTP_PASS)
        server.sendmail(settings.EMAIL_FROM, [recipient_email], msg.as_string())


async def send_mail_async(
    template_name: str,
    recipient_email: str,
    subject: str,
    context: Dict[str, Any],
    text_body: Optional[str] = None,
) -> None:
    """
    Render a Jinja2 template and deliver it over SMTP.
    The blocking SMTP session runs in the threadpool; delivery errors propagate to the caller.
    """
    settings = get_settings()
    if not settings.email_enabled:
        raise EmailNotConfiguredError("SMTP_USER and SMTP_PASS must be set to send email")

    html_body = render_template(template_name, context)
    msg = _build_message(recipient_email, subject, html_body, text_body)
    await run_in_threadpool(_send_smtp, recipient_email, msg)
    logger.info(f"Email '{template_name}' sent to {recipient_email}")
