import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape

from ..core.settings import Settings
from ..domain.interfaces import OutgoingEmail


class SmtpMailer:
    """Sends HTML mail through an authenticated STARTTLS submission server."""

    def __init__(self, settings: Settings):
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.user = settings.SMTP_USER
        self.password = settings.SMTP_PASSWORD
        self.from_addr = settings.SMTP_FROM or settings.SMTP_USER
        self.from_name = settings.SMTP_FROM_NAME

    def send(self, to: str, subject: str, html_body: str) -> None:
        if not (self.host and self.port and self.user and self.password):
            raise RuntimeError("SMTP is not configured. Set SMTP_HOST, SMTP_USER and SMTP_PASSWORD.")

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self.from_name} <{self.from_addr}>" if self.from_name else self.from_addr
        msg["To"] = to
        msg.attach(MIMEText(html_body, "html"))

        with smtplib.SMTP(self.host, self.port, timeout=30) as server:
            server.ehlo()
            server.starttls()
            server.login(self.user, self.password)
            server.sendmail(self.from_addr, [to], msg.as_string())


def verification_email(to_email: str, code: str, *, app_name: str, ttl_minutes: int) -> OutgoingEmail:
    subject = f"Your verification code - {app_name}"
    html = f"""
    <!DOCTYPE html>
    <html>
    <body style="font-family:Arial,sans-serif;line-height:1.6;color:#333">
      <div style="max-width:600px;margin:0 auto;padding:20px">
        <div style="background-color:#009934;color:white;padding:20px;text-align:center;border-radius:5px 5px 0 0">
          <h1>Confirm your email</h1>
        </div>
        <div style="background-color:#f9f9f9;padding:30px;border-radius:0 0 5px 5px">
          <p>Hello,</p>
          <p>Thank you for registering with {escape(app_name)}.</p>
          <p>Use the code below to verify your email address:</p>
          <p style="font-size:32px;font-weight:bold;color:#009934;letter-spacing:5px;text-align:center">{code}</p>
          <p>This code is valid for <strong>{ttl_minutes} minutes</strong>.</p>
          <p>If you did not create an account, you can ignore this email.</p>
        </div>
      </div>
    </body>
    </html>
    """
    return OutgoingEmail(to=to_email, subject=subject, html_body=html)
