# guest_communications/notifier.py
from typing import Optional

from .email_client import EmailClient
from ..utils.logger import get_logger
from ..utils.models import Booking
from ..utils.pricing import format_currency


class Notifier:
    def __init__(self, email_client: Optional[EmailClient] = None):
        self.email = email_client or EmailClient()
        self.logger = get_logger("notifier")

    def _deliver(self, event: str, to: str, subject: str, body: str, html: bool = False, **context) -> bool:
        try:
            self.email.send(to=to, subject=subject, body=body, html=html)
            self.logger.info(event, to=to, **context)
            return True
        except Exception as e:
            self.logger.error(f"{event}_failed", error=str(e), to=to, **context)
            return False

    def send_verification_code(self, email: str, code: str) -> bool:
        """Email the one-time code that activates a new account."""
        if not self.email.configured:
            # No SMTP in development: the code is only visible in the server log
            self.logger.warning("verification_code_not_emailed", email=email, code=code)
            return False
        body = (
            f"Bienvenue sur LOCADZ.\n\n"
            f"Votre code de sécurité : {code}\n\n"
            f"Ce code expire dans quelques minutes."
        )
        return self._deliver("verification_code_sent", email, "Votre code LOCADZ", body)

    def send_password_reset(self, email: str, link: str) -> bool:
        body = (
            f"""
            <div style=\"font-family:Arial,sans-serif;line-height:1.6;color:#222\">
              <p>Nous avons reçu une demande de réinitialisation de mot de passe.</p>
              <p>
                <a href=\"{link}\" style=\"display:inline-block;padding:10px 16px;background:#4f46e5;color:#fff;text-decoration:none;border-radius:6px;font-weight:600\">
                  Réinitialiser le mot de passe
                </a>
              </p>
              <p style=\"font-size:12px;color:#666\">Ce lien expire bientôt. Ignorez cet email si vous n'êtes pas à l'origine de la demande.</p>
            </div>
            """
        )
        return self._deliver("password_reset_sent", email, "Réinitialisation du mot de passe", body, html=True)

    def notify_booking_request(self, host_email: str, booking: Booking, property_title: str) -> bool:
        """Tell a host a traveler is waiting for approval."""
        body = (
            f"Nouvelle demande de réservation pour {property_title}.\n"
            f"Du {booking.start_date} au {booking.end_date} ({booking.nights} nuits)\n"
            f"Montant : {format_currency(booking.total_price)}\n"
            f"Référence : {booking.payment_id}\n"
        )
        return self._deliver(
            "booking_request_sent", host_email, f"Demande de réservation - {property_title}", body,
            booking_id=booking.id,
        )

    def notify_booking_status(self, traveler_email: str, booking: Booking, property_title: str) -> bool:
        body = (
            f"Votre réservation pour {property_title} "
            f"du {booking.start_date} au {booking.end_date} est maintenant : {booking.status.value}."
        )
        return self._deliver(
            "booking_status_sent", traveler_email, f"Réservation {booking.status.value} - {property_title}", body,
            booking_id=booking.id, status=booking.status.value,
        )
