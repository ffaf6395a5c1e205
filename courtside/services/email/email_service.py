# ===== courtside/services/email/email_service.py =====
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional
import logging

from courtside.config.settings import settings

logger = logging.getLogger(__name__)

PAYMENT_LABELS = {
    "on_place": "Pay on site",
    "card": "Card",
}


class EmailService:
    """Booking notifications over SMTP"""

    @staticmethod
    def _open_smtp() -> smtplib.SMTP:
        if settings.EMAIL_USE_TLS:
            server = smtplib.SMTP(settings.EMAIL_HOST, settings.EMAIL_PORT)
            server.starttls()
        else:
            server = smtplib.SMTP_SSL(settings.EMAIL_HOST, settings.EMAIL_PORT)

        if settings.EMAIL_USERNAME:
            server.login(settings.EMAIL_USERNAME, settings.EMAIL_PASSWORD)
        return server

    @staticmethod
    def send_email(to_email: str, subject: str, html_content: str, plain_text: Optional[str] = None) -> bool:
        """
        Send a multipart email. SMTP failures propagate so the calling task
        can retry.
        """
        message = MIMEMultipart('alternative')
        message['Subject'] = subject
        message['From'] = f"{settings.EMAIL_FROM_NAME} <{settings.EMAIL_FROM_ADDRESS}>"
        message['To'] = to_email
        if plain_text:
            message.attach(MIMEText(plain_text, 'plain'))
        message.attach(MIMEText(html_content, 'html'))

        with EmailService._open_smtp() as server:
            server.sendmail(settings.EMAIL_FROM_ADDRESS, [to_email], message.as_string())

        logger.info(f"Sent '{subject}' to {to_email}")
        return True

    @staticmethod
    def send_reservation_confirmation_email(
            email: str,
            facility_name: str,
            location: str,
            start_label: str,
            end_label: str,
            total_price: float,
            payment_method: Optional[str] = None,
            user_name: Optional[str] = None
    ) -> bool:
        """Send booking confirmation after payment"""
        display_name = user_name or "there"
        price_label = f"{total_price:.2f} {settings.CURRENCY}"
        payment_label = PAYMENT_LABELS.get(payment_method or "", "-")
        reservations_url = f"{settings.FRONTEND_URL}/reservations"

        html_content = f"""
        <!DOCTYPE html>
        <html>
        <head>
            <meta charset="UTF-8">
            <meta name="viewport" content="width=device-width, initial-scale=1.0">
        </head>
        <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
            <div style="background-color: #1f7a4d; padding: 30px; text-align: center; border-radius: 10px 10px 0 0;">
                <h1 style="color: white; margin: 0; font-size: 28px;">Booking Confirmed</h1>
            </div>

            <div style="background-color: #ffffff; padding: 30px; border: 1px solid #e0e0e0; border-top: none; border-radius: 0 0 10px 10px;">
                <h2 style="color: #333; margin-top: 0;">Hi {display_name}!</h2>

                <p style="font-size: 16px; color: #555;">
                    Your reservation at <strong>{facility_name}</strong> is confirmed.
                </p>

                <table style="font-size: 15px; color: #555; margin: 20px 0;">
                    <tr><td style="padding-right: 20px;">Where</td><td>{location or facility_name}</td></tr>
                    <tr><td style="padding-right: 20px;">From</td><td>{start_label}</td></tr>
                    <tr><td style="padding-right: 20px;">Until</td><td>{end_label}</td></tr>
                    <tr><td style="padding-right: 20px;">Price</td><td>{price_label}</td></tr>
                    <tr><td style="padding-right: 20px;">Payment</td><td>{payment_label}</td></tr>
                </table>

                <p style="font-size: 14px; color: #777;">
                    Manage your bookings at <a href="{reservations_url}">{reservations_url}</a>
                </p>
            </div>
        </body>
        </html>
        """

        plain_text = f"""
Hi {display_name}!

Your reservation at {facility_name} is confirmed.

Where: {location or facility_name}
From: {start_label}
Until: {end_label}
Price: {price_label}
Payment: {payment_label}

Manage your bookings at {reservations_url}
        """

        return EmailService.send_email(
            to_email=email,
            subject=f"Booking confirmed - {facility_name}",
            html_content=html_content,
            plain_text=plain_text
        )
