"""
WhatsApp delivery through the ChatPro HTTP API.
"""

import logging
import re

import requests
from django.conf import settings

logger = logging.getLogger(__name__)


def format_phone_number(phone):
    """
    Brazilian WhatsApp format: digits only, ``55`` country code prefixed to
    10 and 11 digit numbers.
    """
    digits = re.sub(r'\D', '', phone or '')
    if digits.startswith('55'):
        return digits
    if len(digits) in (10, 11):
        return f"55{digits}"
    return digits


def is_configured():
    return bool(settings.CHATPRO_API_URL and settings.CHATPRO_API_KEY)


def send_whatsapp(phone, message):
    """Sends a text message; returns ``True`` only on an HTTP 200 answer."""
    if not is_configured():
        logger.warning("ChatPro API not configured")
        return False

    to = format_phone_number(phone)
    if not to:
        logger.warning("WhatsApp message skipped: empty phone number")
        return False

    try:
        response = requests.post(
            f"{settings.CHATPRO_API_URL.rstrip('/')}/send-message",
            json={'phone': to, 'message': message, 'type': 'text'},
            headers={
                'Authorization': f"Bearer {settings.CHATPRO_API_KEY}",
                'Content-Type': 'application/json',
            },
            timeout=settings.CHATPRO_TIMEOUT,
        )
    except requests.Timeout:
        logger.error(f"ChatPro timeout sending to {to}")
        return False
    except requests.RequestException as e:
        logger.error(f"WhatsApp send error to {to}: {e}")
        return False

    if response.status_code != 200:
        logger.error(f"ChatPro answered {response.status_code} for {to}")
        return False
    return True
