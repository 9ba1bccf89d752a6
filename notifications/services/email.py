"""
Transactional email through Django's mail backend.
"""

import logging
import smtplib

from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


def send_email(to, subject, body):
    if not to:
        logger.warning(f"Email '{subject}' skipped: no recipient")
        return False

    try:
        sent = send_mail(
            subject=f"{subject} - MyServ",
            message=body,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[to],
            fail_silently=False,
        )
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Email '{subject}' to {to} failed: {e}")
        return False

    return sent > 0


def send_password_reset_email(user, link):
    body = (
        f"Olá {user.full_name}!\n\n"
        "Recebemos um pedido para redefinir sua senha. "
        f"Use o link abaixo para escolher uma nova senha:\n\n{link}\n\n"
        "Se você não fez este pedido, ignore este email."
    )
    return send_email(user.email, "Redefinir sua senha", body)


def send_email_verification_email(user, link):
    body = (
        f"Olá {user.full_name}!\n\n"
        f"Confirme seu e-mail para ativar todos os recursos da sua conta:\n\n{link}\n\n"
        "Se você não criou uma conta no MyServ, ignore este email."
    )
    return send_email(user.email, "Confirme seu e-mail", body)
