import logging
import re
from django.conf import settings
from django.core.mail import send_mail
import requests
from twilio.base.exceptions import TwilioException
from twilio.rest import Client as TwilioClient
from .models import Notification

logger = logging.getLogger(__name__)

E164_PATTERN = re.compile(r'^\+\d{9,15}$')


def notify(user, message, type='info'):
    """Store an in-app notification for ``user``."""
    notification = Notification.objects.create(recipient=user, type=type, message=message)
    logger.info(f"Notification {notification.id} ({type}) created for user {user.id}")
    return notification


def _send_email(user, subject, message, html_message=None):
    if not user.email:
        return False
    try:
        send_mail(
            subject=subject,
            message=message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[user.email],
            html_message=html_message,
            fail_silently=False,
        )
    except Exception as e:
        logger.error(f"Failed to send email to {user.email}: {str(e)}")
        return False
    return True


def send_notification(user, subject, email_message, sms_message):
    """
    Send notifications to users via email and SMS.

    SMS goes out only when Twilio is configured and the phone number is in
    E.164 form; a Twilio failure falls back to a second email attempt.
    """
    email_sent = _send_email(user, subject, email_message)

    phone = user.phone_number
    if not phone or not settings.TWILIO_ACCOUNT_SID:
        return email_sent
    if not E164_PATTERN.match(phone):
        logger.warning(f"Skipping SMS for user {user.id}, phone number not in E.164 format: {phone}")
        return email_sent
    try:
        twilio_client = TwilioClient(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)
        twilio_client.messages.create(
            body=sms_message,
            from_=settings.TWILIO_PHONE_NUMBER,
            to=phone
        )
        logger.info(f"SMS notification sent to {phone}")
        return True
    except (TwilioException, requests.RequestException) as e:
        logger.error(f"Failed to send SMS to {phone}: {str(e)}")
        return email_sent or _send_email(user, subject, email_message)


def send_approval_email(user):
    subject = "Your WorkBond provider account has been approved"
    message = (
        f"Dear {user.name},\n\n"
        f"Your provider account has been approved. You can now log in and start offering your services.\n"
        f"Login: {settings.CLIENT_URL}/login\n\n"
        f"Best regards,\nWorkBond Team"
    )
    html_message = (
        f"<h2>Welcome to WorkBond, {user.name}!</h2>"
        f"<p>Your provider account has been <strong>approved</strong>.</p>"
        f"<p>You can now <a href=\"{settings.CLIENT_URL}/login\">log in</a> and start offering your services.</p>"
        f"<p>Best regards,<br>WorkBond Team</p>"
    )
    return _send_email(user, subject, message, html_message)


def send_rejection_email(user, reason=None):
    subject = "Update on your WorkBond provider application"
    reason_line = f"Reason: {reason}\n" if reason else ""
    message = (
        f"Dear {user.name},\n\n"
        f"We are sorry to let you know that your provider application was not approved.\n"
        f"{reason_line}\n"
        f"You may contact support if you believe this was a mistake.\n\n"
        f"Best regards,\nWorkBond Team"
    )
    reason_html = f"<p><strong>Reason:</strong> {reason}</p>" if reason else ""
    html_message = (
        f"<h2>Hello {user.name},</h2>"
        f"<p>We are sorry to let you know that your provider application was not approved.</p>"
        f"{reason_html}"
        f"<p>You may contact support if you believe this was a mistake.</p>"
        f"<p>Best regards,<br>WorkBond Team</p>"
    )
    return _send_email(user, subject, message, html_message)
