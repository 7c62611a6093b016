import logging
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail
from eventreg.core.config import settings
from eventreg.core.exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)


class Mailer:
    """Outbound mail through SendGrid."""

    def __init__(self, api_key=None, from_email=None, client_url=None):
        self.api_key = api_key or settings.sendgrid_api_key
        self.from_email = from_email or settings.sendgrid_from_email
        self.client_url = (client_url or settings.client_url).rstrip("/")

    def send(self, to_email: str, subject: str, html_content: str):
        message = Mail(
            from_email=self.from_email,
            to_emails=to_email,
            subject=subject,
            html_content=html_content,
        )
        try:
            sg = SendGridAPIClient(self.api_key)
            response = sg.send(message)
        except Exception as e:
            logger.exception(f"Failed to send '{subject}' to {to_email}")
            raise EmailDeliveryError() from e

        logger.info(f"'{subject}' sent to {to_email}, status: {response.status_code}")

    def send_confirmation_email(self, to_email: str, name: str, token: str):
        """Send the account confirmation link"""
        url = f"{self.client_url}/confirmemail/{token}"
        first_name = name.split(" ")[0] if name else ""
        html_content = f"""
        <html>
            <body style="font-family: Arial, sans-serif; line-height: 1.6;">
                <p>Hi {first_name},</p>
                <p>Thanks for signing up. Please confirm your email address by opening the link below:</p>
                <p><a href="{url}">{url}</a></p>
                <br>
                <p>If you did not create an account, please ignore this email.</p>
            </body>
        </html>
        """
        self.send(to_email, "Email Confirmation", html_content)

    def send_reset_email(self, to_email: str, token: str):
        """Send the password reset link"""
        url = f"{self.client_url}/resetpassword/{token}"
        html_content = f"""
        <html>
            <body style="font-family: Arial, sans-serif; line-height: 1.6;">
                <p>We received a request to reset your password.</p>
                <p>Please use the following link to choose a new password:</p>
                <p><a href="{url}">{url}</a></p>
                <p>This link will expire in <b>{settings.reset_token_expire_minutes} minutes</b>.</p>
                <br>
                <p>If you did not request a password reset, please ignore this email.</p>
            </body>
        </html>
        """
        self.send(to_email, "Reset Your Password", html_content)

    def send_otp_email(self, to_email: str, otp: str):
        """Send a one-time password reset code"""
        html_content = f"""
        <html>
            <body style="font-family: Arial, sans-serif; line-height: 1.6;">
                <p>We received a request to reset your password.</p>
                <p>Please use the following code:</p>
                <h2 style="color: #2c3e50; font-size: 28px; letter-spacing: 3px; text-align: center;">
                    {otp}
                </h2>
                <br>
                <p>If you did not request a password reset, please ignore this email.</p>
            </body>
        </html>
        """
        self.send(to_email, "Your Password Reset Code", html_content)


def get_mailer() -> Mailer:
    return Mailer()
