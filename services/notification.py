import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape

import aiosmtplib

import config

logger = logging.getLogger(__name__)

SHOP_NAME = "E-commerce Inventory"
SIGNATURE = f"Best regards,\n{SHOP_NAME} Team"


def _wrap_html(heading: str, body: str, color: str = "#333") -> str:
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        f'<h2 style="color: {color};">{heading}</h2>'
        f'{body}'
        f'<p style="color: #666; font-size: 14px;">Best regards,<br>{SHOP_NAME} Team</p>'
        '</div>'
    )


def _otp_block(otp: str) -> str:
    return (
        '<div style="background: #f0f0f0; padding: 20px; text-align: center; margin: 20px 0;">'
        f'<h1 style="color: #007bff; font-size: 32px; margin: 0;">{escape(otp)}</h1>'
        '</div>'
    )


def build_message(recipient: str, subject: str, text: str, html: str) -> MIMEMultipart:
    message = MIMEMultipart("alternative")
    message["From"] = config.SMTP_FROM or f"noreply@{SHOP_NAME.lower().replace(' ', '')}.com"
    message["To"] = recipient
    message["Subject"] = subject
    message.attach(MIMEText(text, "plain", "utf-8"))
    message.attach(MIMEText(html, "html", "utf-8"))
    return message


class NotificationService:
    """
    Transactional email over SMTP.

    Every sender returns True when the message was handed to the SMTP server
    and False otherwise. Delivery problems are logged, never raised, so the
    calling operation can still succeed.
    """

    @staticmethod
    async def send_email(recipient: str, subject: str, text: str, html: str, operation: str) -> bool:
        if not config.SMTP_HOST:
            logger.error(f"❌ [system] {operation}: SMTP is not configured, email to {recipient} not sent")
            return False
        try:
            await aiosmtplib.send(
                build_message(recipient, subject, text, html),
                hostname=config.SMTP_HOST,
                port=config.SMTP_PORT,
                username=config.SMTP_USER or None,
                password=config.SMTP_PASSWORD or None,
                start_tls=config.SMTP_USE_TLS,
                timeout=config.SMTP_TIMEOUT_SECONDS,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(f"❌ [system] {operation}: failed to send email to {recipient}: {e}")
            return False
        logger.info(f"✉️ [system] {operation}: email sent to {recipient}")
        return True

    @staticmethod
    async def send_otp(email: str, otp: str) -> bool:
        minutes = config.REGISTRATION_OTP_TTL_MINUTES
        html = _wrap_html(
            "Email Verification",
            f"<p>Thank you for registering with {SHOP_NAME}!</p>"
            "<p>Please use the following OTP to verify your email address:</p>"
            f"{_otp_block(otp)}"
            f"<p><strong>Important:</strong> this OTP expires in {minutes} minutes. "
            "Do not share it with anyone.</p>",
        )
        text = (f"Your verification code is {otp}. It expires in {minutes} minutes.\n\n{SIGNATURE}")
        return await NotificationService.send_email(
            email, f"OTP Verification - {SHOP_NAME}", text, html, "sendOTP"
        )

    @staticmethod
    async def send_welcome(email: str, username: str) -> bool:
        name = escape(username)
        html = _wrap_html(
            f"Welcome {name}!",
            f"<p>Thank you for registering with {SHOP_NAME}!</p>"
            "<p>Your registration is complete and you can now log in with your email and password.</p>",
        )
        text = f"Welcome {username}!\n\nYour registration is complete, you can now log in.\n\n{SIGNATURE}"
        return await NotificationService.send_email(
            email, f"Welcome to {SHOP_NAME}!", text, html, "sendWelcomeEmail"
        )

    @staticmethod
    async def send_approval(email: str, username: str) -> bool:
        html = _wrap_html(
            "Account Approved!",
            f"<p>Great news, {escape(username)}!</p>"
            "<p>Your account has been approved by the administrator. You can now log in.</p>"
            f"<p><strong>Email:</strong> {escape(email)}</p>",
            color="#28a745",
        )
        text = f"Great news, {username}!\n\nYour account has been approved, you can now log in.\n\n{SIGNATURE}"
        return await NotificationService.send_email(
            email, f"Account Approved - {SHOP_NAME}", text, html, "sendApprovalEmail"
        )

    @staticmethod
    async def send_rejection(email: str, username: str) -> bool:
        html = _wrap_html(
            "Account Status Update",
            f"<p>Hello {escape(username)},</p>"
            "<p>We regret to inform you that your account registration has been rejected by the administrator.</p>"
            "<p>If you believe this was done in error, please contact our support team.</p>",
            color="#dc3545",
        )
        text = (f"Hello {username},\n\nYour account registration has been rejected by the administrator."
                f"\n\n{SIGNATURE}")
        return await NotificationService.send_email(
            email, f"Account Status Update - {SHOP_NAME}", text, html, "sendRejectionEmail"
        )

    @staticmethod
    async def send_password_reset_otp(email: str, otp: str) -> bool:
        minutes = config.OTP_TTL_MINUTES
        html = _wrap_html(
            "Password Reset",
            "<p>We received a request to reset your password. Use this OTP to continue:</p>"
            f"{_otp_block(otp)}"
            f"<p>This OTP expires in {minutes} minutes. If you didn't request a reset, ignore this email.</p>",
        )
        text = f"Your password reset code is {otp}. It expires in {minutes} minutes.\n\n{SIGNATURE}"
        return await NotificationService.send_email(
            email, f"Password Reset OTP - {SHOP_NAME}", text, html, "sendPasswordResetOTP"
        )

    @staticmethod
    async def send_profile_update_otp(email: str, otp: str) -> bool:
        minutes = config.OTP_TTL_MINUTES
        html = _wrap_html(
            "Profile Update Verification",
            "<p>Use this OTP to confirm the changes to your profile:</p>"
            f"{_otp_block(otp)}"
            f"<p>This OTP expires in {minutes} minutes.</p>",
        )
        text = f"Your profile update code is {otp}. It expires in {minutes} minutes.\n\n{SIGNATURE}"
        return await NotificationService.send_email(
            email, f"Profile Update OTP - {SHOP_NAME}", text, html, "sendProfileUpdateOTP"
        )
