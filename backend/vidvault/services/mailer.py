"""
Mail delivery over SMTP.

Login codes must be delivered (failures raise MailDeliveryError); welcome and
notification mails are best-effort and only logged when they fail.
smtplib is blocking, so every send runs in a worker thread.
"""
import asyncio
import datetime as dt
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Optional

from vidvault.config import Settings, settings as default_settings

logger = logging.getLogger("uvicorn.error")

LOGIN_TOKEN_TTL_MINUTES = 10


class MailDeliveryError(Exception):
    """SMTP transport refused or failed to deliver a message."""


class EmailSender:
    def __init__(self, settings: Settings = default_settings):
        self.settings = settings

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    def _connect(self) -> smtplib.SMTP:
        s = self.settings
        if s.mail_secure:
            server = smtplib.SMTP_SSL(s.mail_host, s.mail_port, timeout=s.mail_timeout)
        else:
            server = smtplib.SMTP(s.mail_host, s.mail_port, timeout=s.mail_timeout)
            server.ehlo()
            server.starttls()
            server.ehlo()
        if s.mail_user and s.mail_password:
            server.login(s.mail_user, s.mail_password)
        return server

    def _sender(self) -> str:
        return self.settings.mail_from or self.settings.mail_user or "no-reply@localhost"

    def _build_message(self, to_email: str, subject: str, html: str) -> MIMEMultipart:
        msg = MIMEMultipart()
        msg["From"] = formataddr((self.settings.mail_from_name, self._sender()))
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.attach(MIMEText(html, "html"))
        return msg

    def _send_sync(self, to_email: str, subject: str, html: str) -> None:
        msg = self._build_message(to_email, subject, html)
        server = self._connect()
        try:
            server.sendmail(self._sender(), [to_email], msg.as_string())
        finally:
            server.quit()

    async def _send(self, to_email: str, subject: str, html: str) -> None:
        try:
            await asyncio.to_thread(self._send_sync, to_email, subject, html)
        except (smtplib.SMTPException, OSError) as e:
            raise MailDeliveryError(str(e)) from e

    async def verify(self) -> bool:
        """Open and close an SMTP session; log the outcome. Never raises."""
        if not self.settings.mail_configured:
            logger.warning("[mail] MAIL_USER/MAIL_PASSWORD not set -> mail delivery disabled")
            return False

        def _check():
            self._connect().quit()

        try:
            await asyncio.to_thread(_check)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("[mail] SMTP check failed for %s:%s: %s",
                         self.settings.mail_host, self.settings.mail_port, e)
            return False
        logger.info("[mail] SMTP server %s:%s ready", self.settings.mail_host, self.settings.mail_port)
        return True

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------
    async def send_login_token(self, email: str, code: str) -> None:
        """Deliver a login code. Raises MailDeliveryError on failure."""
        try:
            await self._send(email, f"Your access code - {self.settings.mail_from_name}",
                             login_token_template(code, self.settings.mail_from_name))
        except MailDeliveryError as e:
            logger.error("[mail] failed to send login code to %s: %s", email, e)
            raise
        logger.info("[mail] login code sent to %s", email)

    async def send_welcome_email(self, email: str, first_name: Optional[str] = None) -> None:
        try:
            await self._send(email, f"Welcome to {self.settings.mail_from_name}!",
                             welcome_template(first_name, self.settings.mail_from_name))
        except MailDeliveryError as e:
            logger.error("[mail] failed to send welcome mail to %s: %s", email, e)
            return
        logger.info("[mail] welcome mail sent to %s", email)

    async def send_notification_email(self, email: str, subject: str, content: str) -> None:
        brand = self.settings.mail_from_name
        try:
            await self._send(email, f"{brand} - {subject}",
                             notification_template(subject, content, brand))
        except MailDeliveryError as e:
            logger.error("[mail] failed to send notification to %s: %s", email, e)
            return
        logger.info("[mail] notification '%s' sent to %s", subject, email)


# ----------------------------------------------------------------------
# Templates
# ----------------------------------------------------------------------
def _footer(brand: str) -> str:
    year = dt.date.today().year
    return (
        '<div style="background: #333; padding: 24px; text-align: center;">'
        f'<p style="color: #999; margin: 0; font-size: 12px;">&copy; {year} {brand}. All rights reserved.</p>'
        '<p style="color: #999; margin: 0; font-size: 12px;">This is an automated message, please do not reply.</p>'
        "</div>"
    )


def login_token_template(code: str, brand: str = "VidVault") -> str:
    return f"""
    <html>
    <body style="margin: 0; padding: 0; font-family: Arial, sans-serif; line-height: 1.6;">
        <div style="max-width: 600px; margin: 0 auto; background: #ffffff;">
            <div style="background: linear-gradient(135deg, #1e88e5, #42a5f5); padding: 40px 30px; text-align: center;">
                <h1 style="color: white; margin: 0; font-size: 32px; font-weight: 300;">{brand}</h1>
            </div>
            <div style="padding: 40px 30px; background: #f8f9fa;">
                <h2 style="color: #333;">Your access code</h2>
                <p style="color: #666;">Use the code below to sign in and watch your videos:</p>
                <div style="background: white; border: 3px dashed #1e88e5; border-radius: 8px; padding: 30px; text-align: center; margin: 30px 0;">
                    <div style="font-size: 36px; font-weight: bold; color: #1e88e5; letter-spacing: 8px; font-family: 'Courier New', monospace;">{code}</div>
                </div>
                <p style="background: #e3f2fd; border-left: 4px solid #1e88e5; padding: 15px; color: #1565c0; font-size: 14px;">
                    <strong>Expires in {LOGIN_TOKEN_TTL_MINUTES} minutes</strong> &bull; Single use &bull; Do not share this code
                </p>
                <p style="font-size: 14px; color: #999;">If you did not request this code you can safely ignore this email.</p>
            </div>
            {_footer(brand)}
        </div>
    </body>
    </html>
    """


def welcome_template(first_name: Optional[str] = None, brand: str = "VidVault") -> str:
    name = first_name or "there"
    return f"""
    <html>
    <body style="margin: 0; padding: 0; font-family: Arial, sans-serif;">
        <div style="max-width: 600px; margin: 0 auto; background: #ffffff;">
            <div style="background: linear-gradient(135deg, #1e88e5, #42a5f5); padding: 40px 30px; text-align: center;">
                <h1 style="color: white; margin: 0; font-size: 32px; font-weight: 300;">{brand}</h1>
            </div>
            <div style="padding: 40px 30px;">
                <h2>Hello, {name}!</h2>
                <p>Your account is ready. Videos shared with you will show up in your library.</p>
                <p>Sign in with your email address; we will send you a one-time code.</p>
            </div>
            {_footer(brand)}
        </div>
    </body>
    </html>
    """


def notification_template(subject: str, content: str, brand: str = "VidVault") -> str:
    return f"""
    <html>
    <body style="margin: 0; padding: 0; font-family: Arial, sans-serif;">
        <div style="max-width: 600px; margin: 0 auto; background: #ffffff;">
            <div style="background: linear-gradient(135deg, #1e88e5, #42a5f5); padding: 30px; text-align: center;">
                <h1 style="color: white; margin: 0; font-size: 28px; font-weight: 300;">{brand}</h1>
            </div>
            <div style="padding: 30px;">
                <h2>{subject}</h2>
                <div>{content}</div>
            </div>
            {_footer(brand)}
        </div>
    </body>
    </html>
    """
