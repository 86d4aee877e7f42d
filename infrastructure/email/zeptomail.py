"""ZeptoMail implementation of EmailProvider.

Sends the two lead emails: a notification to the site owner and an
acknowledgement to the person who submitted the contact form.
"""

import os
from datetime import datetime
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from config import EmailSettings
from infrastructure.http_client import HttpClient
from shared.logging import get_logger

log = get_logger(__name__)

_ZEPTO_API_URL = "https://api.zeptomail.in/v1.1/email"
_DEFAULT_TEMPLATE_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(__file__))),
    "templates",
    "emails",
)


def _format_time(value: Any) -> str:
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M UTC")
    return str(value) if value else ""


class ZeptoMailProvider:
    def __init__(
        self,
        settings: EmailSettings,
        http_client: HttpClient,
        template_dir: str = _DEFAULT_TEMPLATE_DIR,
    ) -> None:
        self._settings = settings
        self._http = http_client
        self._jinja = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html", "xml"]),
        )

    async def _send(
        self,
        to_email: str,
        to_name: Optional[str],
        subject: str,
        html_body: str,
        text_body: Optional[str] = None,
        reply_to: Optional[str] = None,
    ) -> bool:
        if not self._settings.zepto_api_token:
            log.warning("zepto_mail_send_skipped", reason="token_not_configured")
            return False

        payload: dict = {
            "from": {
                "address": self._settings.zepto_from_email,
                "name": self._settings.zepto_from_name,
            },
            "to": [
                {
                    "email_address": {
                        "address": to_email,
                        "name": to_name or to_email,
                    }
                }
            ],
            "subject": subject,
            "htmlbody": html_body,
        }
        if text_body:
            payload["textbody"] = text_body
        if reply_to:
            payload["reply_to"] = [{"address": reply_to}]

        token = self._settings.zepto_api_token
        if not token.startswith("Zoho-enczapikey "):
            token = f"Zoho-enczapikey {token}"

        headers = {"Authorization": token, "Content-Type": "application/json"}

        try:
            response = await self._http.post(
                _ZEPTO_API_URL, json=payload, headers=headers
            )
            if response.status_code in (200, 201, 202):
                log.info("email_sent_success", subject=subject)
                return True
            log.error(
                "email_sent_failed",
                subject=subject,
                status_code=response.status_code,
                response=response.text[:200],
            )
            return False
        except Exception as e:
            log.error(
                "email_send_error",
                subject=subject,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

    async def send_lead_notification(self, lead: dict[str, Any]) -> bool:
        if not self._settings.admin_email:
            log.warning("lead_notification_skipped", reason="admin_email_not_configured")
            return False

        name = lead.get("name", "")
        dashboard_url = f"{self._settings.admin_dashboard_url.rstrip('/')}/dashboard/leads"
        context = {
            "name": name,
            "email": lead.get("email", ""),
            "message": lead.get("message", ""),
            "country": lead.get("country") or "Unknown",
            "page": lead.get("page") or "contact",
            "time": _format_time(lead.get("createdAt")),
            "dashboard_url": dashboard_url,
        }
        html_body = self._jinja.get_template("lead_notification.html").render(**context)
        text_body = (
            f"New Lead Received!\n\n"
            f"Name: {context['name']}\n"
            f"Email: {context['email']}\n"
            f"Country: {context['country']}\n"
            f"Page: {context['page']}\n"
            f"Time: {context['time']}\n\n"
            f"Message:\n{context['message']}\n\n"
            f"View in Dashboard: {dashboard_url}"
        )
        return await self._send(
            self._settings.admin_email,
            None,
            f"New Lead: {name} contacted you",
            html_body,
            text_body,
            reply_to=lead.get("email"),
        )

    async def send_lead_acknowledgement(self, lead: dict[str, Any]) -> bool:
        name = lead.get("name", "")
        html_body = self._jinja.get_template("lead_acknowledgement.html").render(
            name=name, message=lead.get("message", "")
        )
        text_body = (
            f"Hi {name},\n\n"
            f"Thank you for reaching out through my portfolio. "
            f"I've received your message and will get back to you within 24-48 hours.\n\n"
            f"Your message:\n{lead.get('message', '')}\n\n"
            f"Sayed Safi"
        )
        return await self._send(
            lead.get("email", ""),
            name,
            "Thank you for contacting me!",
            html_body,
            text_body,
        )
