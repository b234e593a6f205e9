from email.message import EmailMessage
from fastapi import Request
from html import escape
import logging
import smtplib
import ssl

logger = logging.getLogger(__name__)


class EmailSendError(RuntimeError):
    pass


class Mailer:
    """SMTP mail client, built once at startup and handed to request handlers."""

    def __init__(self, host: str, port: int, user: str = "", password: str = "",
                 from_email: str = "no-reply@localhost", mode: str = "smtp",
                 production: bool = False, site_url: str = "", timeout: int = 15):
        self.host = host
        self.port = int(port)
        self.user = user
        self.password = password
        self.from_email = from_email
        self.production = production
        self.site_url = site_url.rstrip("/")
        self.timeout = timeout
        has_auth = bool(user) and bool(password)
        # Outside production, without credentials there is nothing to deliver through.
        self.log_only = mode == "log" or (not production and not has_auth)

    def send(self, to: str, subject: str, html: str, text: str = ""):
        to = (to or "").strip()
        if not to or "@" not in to:
            raise EmailSendError("Invalid recipient email")

        if self.log_only:
            logger.info(f"EMAIL (log mode) to={to} subject={subject}\n{text}")
            return False

        msg = EmailMessage()
        msg["From"] = self.from_email
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(text or subject)
        msg.add_alternative(html, subtype="html")

        try:
            self._deliver(msg)
            logger.info(f"Email sent to {to}: {subject}")
            return True
        except (smtplib.SMTPException, OSError) as e:
            if self.production:
                raise EmailSendError(f"Failed to send email to {to}: {e}") from e
            logger.warning(f"[DEV] Email send failed, logging instead: to={to} subject={subject} error={e}")
            return False

    def _deliver(self, msg: EmailMessage):
        if self.port == 465:
            with smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout,
                                  context=ssl.create_default_context()) as smtp:
                if self.user and self.password:
                    smtp.login(self.user, self.password)
                smtp.send_message(msg)
            return

        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            smtp.ehlo()
            if smtp.has_extn("starttls"):
                smtp.starttls(context=ssl.create_default_context())
                smtp.ehlo()
            if self.user and self.password:
                smtp.login(self.user, self.password)
            smtp.send_message(msg)

    def send_property_confirmation(self, email: str, name: str, property_title: str, property_id: str):
        title = escape(property_title or "")
        html = f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
          <h2 style="background-color: #C70000; color: white; padding: 20px;">Property Submitted</h2>
          <p>Hi {escape(name or "User")},</p>
          <p>Your property <strong>{title}</strong> has been posted successfully.</p>
          <p><span style="background-color: #ffc107; padding: 5px 10px;">Pending Admin Approval</span></p>
          <p>Property ID: {escape(property_id)}</p>
          <p>We will notify you once it has been reviewed.</p>
        </div>
        """
        return self.send(
            email,
            f"Property Posted: {property_title}",
            html,
            f'Your property "{property_title}" has been posted successfully and is under review.',
        )

    def send_property_decision(self, email: str, name: str, property_title: str, property_id: str,
                               approved: bool, rejection_reason: str = None):
        title = escape(property_title or "")
        if approved:
            body = (
                f"<p>Great news! Your property <strong>{title}</strong> has been approved and is now live.</p>"
                f'<p><a href="{self.site_url}/property/{escape(property_id)}">View your listing</a></p>'
            )
        else:
            body = f"<p>Your property <strong>{title}</strong> was not approved.</p>"
            if rejection_reason:
                body += f"<p><strong>Reason:</strong> {escape(rejection_reason)}</p>"
            body += "<p>Please update the listing and submit it again.</p>"
        color = "#28a745" if approved else "#dc3545"
        html = f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
          <h2 style="background-color: {color}; color: white; padding: 20px;">Property Review</h2>
          <p>Hi {escape(name or "User")},</p>
          {body}
        </div>
        """
        if approved:
            subject = f"Property Approved: {property_title}"
            text = f'Your property "{property_title}" has been approved and is now live!'
        else:
            subject = f"Property Review: {property_title}"
            text = f'Your property "{property_title}" needs some attention.'
        return self.send(email, subject, html, text)


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer
