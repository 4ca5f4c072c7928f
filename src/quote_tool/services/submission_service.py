"""
Submission Service - validates contact requests and relays them by email.

The configured quote travels as the serialized QuoteRecord produced by
the engine; the service only formats it, it never recomputes prices.
"""
import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from email.message import EmailMessage
from typing import Optional

import aiosmtplib

from ..config.settings import Settings, get_settings
from .formatting import INDUSTRY_NAMES, WEBSITE_TYPE_NAMES, format_quote

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
PHONE_RE = re.compile(r'^\+?[\d\s\-()]+$')

SUCCESS_MESSAGE = 'Vielen Dank für Ihre Anfrage! Wir melden uns innerhalb von 48 Stunden bei Ihnen.'
UNAVAILABLE_ERROR = (
    'E-Mail-Service temporär nicht verfügbar. Bitte versuchen Sie es später noch einmal '
    'oder kontaktieren Sie uns direkt.'
)
GENERIC_ERROR = (
    'Ein unerwarteter Fehler ist aufgetreten. Bitte versuchen Sie es erneut '
    'oder kontaktieren Sie uns direkt.'
)


@dataclass
class ContactRequest:
    """A contact form submission, optionally carrying a configured quote."""
    name: str = ""
    company: str = ""
    email: str = ""
    phone: str = ""
    industry: str = ""
    website_type: str = ""
    message: str = ""
    quote: Optional[dict] = None
    quote_unreadable: bool = False

    @classmethod
    def from_payload(cls, payload: dict) -> 'ContactRequest':
        """
        Create from a form payload.

        Accepts the quote either as a structure under 'quote' or as the JSON
        string the site's hidden 'calculator-data' field carries.
        """
        def text(key: str) -> str:
            return str(payload.get(key) or '').strip()

        quote = payload.get('quote')
        unreadable = False
        raw = payload.get('calculator-data') or payload.get('calculator_data')
        if quote is None and raw:
            try:
                quote = json.loads(raw)
            except (TypeError, ValueError):
                unreadable = True
            if quote is not None and not isinstance(quote, dict):
                quote, unreadable = None, True

        return cls(
            name=text('name'),
            company=text('company'),
            email=text('email'),
            phone=text('phone'),
            industry=text('industry'),
            website_type=text('website-type') or text('website_type'),
            message=text('message'),
            quote=quote,
            quote_unreadable=unreadable,
        )


@dataclass
class ValidationResult:
    """Result of contact validation."""
    valid: bool
    errors: list[str] = field(default_factory=list)


@dataclass
class SubmissionResult:
    """Acknowledgment returned to the form."""
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        if self.success:
            return {"success": True, "message": self.message}
        return {"success": False, "error": self.error}


class SmtpMailer:
    """Sends messages through an SMTP relay."""

    def __init__(self, settings: Settings):
        self.settings = settings

    async def send(self, message: EmailMessage) -> None:
        await aiosmtplib.send(
            message,
            hostname=self.settings.smtp_host,
            port=self.settings.smtp_port,
            username=self.settings.smtp_username,
            password=self.settings.smtp_password,
            start_tls=bool(self.settings.smtp_username),
        )


class SubmissionService:
    """Validates contact requests and relays them to the agency inbox."""

    def __init__(self, mailer=None, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.mailer = mailer or SmtpMailer(self.settings)

    def validate(self, contact: ContactRequest) -> ValidationResult:
        """Check required fields and field shapes."""
        result = ValidationResult(valid=True)

        missing = [
            label for label, value in (
                ('name', contact.name),
                ('email', contact.email),
                ('company', contact.company),
                ('industry', contact.industry),
            ) if not value
        ]
        if missing:
            result.errors.append(
                'Required fields missing: name, email, company, and industry are required'
            )

        if contact.email and not EMAIL_RE.match(contact.email):
            result.errors.append('Invalid email address')

        if contact.phone and (not PHONE_RE.match(contact.phone) or len(contact.phone) < 10):
            result.errors.append('Invalid phone number')

        if contact.company and len(contact.company) < 2:
            result.errors.append('Company name must be at least 2 characters')

        result.valid = not result.errors
        return result

    def compose_body(self, contact: ContactRequest, received_at: Optional[datetime] = None) -> str:
        """Plain-text notification body."""
        received_at = received_at or datetime.now()
        if contact.quote_unreadable:
            quote_text = 'Kalkulator-Daten konnten nicht verarbeitet werden'
        else:
            quote_text = format_quote(contact.quote)

        return "\n".join([
            "Hallo Team,",
            "",
            "Eine neue SHK Website-Anfrage ist eingegangen:",
            "",
            "KONTAKTDATEN:",
            f"• Name: {contact.name}",
            f"• Unternehmen: {contact.company}",
            f"• E-Mail: {contact.email}",
            f"• Telefon: {contact.phone or 'Nicht angegeben'}",
            f"• Branche: {INDUSTRY_NAMES.get(contact.industry, contact.industry)}",
            f"• Gewünschte Website: "
            f"{WEBSITE_TYPE_NAMES.get(contact.website_type, contact.website_type) or 'Nicht spezifiziert'}",
            "",
            "NACHRICHT:",
            contact.message or 'Keine Nachricht hinterlassen',
            "",
            "",
            quote_text,
            "",
            f"Anfrage-Zeitstempel: {received_at.strftime('%d.%m.%Y, %H:%M')} Uhr",
            "",
            "Viele Grüße,",
            "Ihr automatisches Benachrichtigungssystem",
        ])

    def compose_message(self, contact: ContactRequest, received_at: Optional[datetime] = None) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.settings.mail_from
        message["To"] = self.settings.mail_to
        message["Reply-To"] = contact.email
        message["Subject"] = f"Neue SHK Website-Anfrage von {contact.company}"
        message.set_content(self.compose_body(contact, received_at))
        return message

    async def submit(self, contact: ContactRequest, validate: bool = True) -> SubmissionResult:
        """
        Validate and relay a contact request.

        Pass validate=False when the caller already ran validate().
        Mail failures are reported in the result, never raised.
        """
        validation = self.validate(contact) if validate else ValidationResult(valid=True)
        if not validation.valid:
            return SubmissionResult(success=False, error=validation.errors[0])

        message = self.compose_message(contact)
        try:
            await self.mailer.send(message)
        except (aiosmtplib.SMTPAuthenticationError, aiosmtplib.SMTPConnectError,
                aiosmtplib.SMTPServerDisconnected, OSError) as e:
            logger.error("Mail relay unavailable for submission from %s: %s", contact.email, e)
            return SubmissionResult(success=False, error=UNAVAILABLE_ERROR)
        except Exception:
            logger.exception("Failed to relay submission from %s", contact.email)
            return SubmissionResult(success=False, error=GENERIC_ERROR)

        logger.info("New contact form submission from %s", contact.email)
        return SubmissionResult(success=True, message=SUCCESS_MESSAGE)
