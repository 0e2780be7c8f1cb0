# guest_communications/email_client.py
import smtplib
from email.mime.text import MIMEText

from config.settings import smtp_config


class EmailClient:
    def __init__(self):
        self.smtp_server = smtp_config.server
        self.smtp_port = smtp_config.port
        self.username = smtp_config.username
        self.password = smtp_config.password

    @property
    def configured(self) -> bool:
        return bool(self.username and self.password)

    def send(self, to: str, subject: str, body: str, html: bool = False):
        msg = MIMEText(body, "html" if html else "plain")
        msg["Subject"] = subject
        msg["From"] = self.username
        msg["To"] = to

        with smtplib.SMTP(self.smtp_server, self.smtp_port) as server:
            server.starttls()
            server.login(self.username, self.password)
            server.sendmail(self.username, [to], msg.as_string())
