from . import email, whatsapp
from .dispatcher import notify
from .messages import TEMPLATES

__all__ = ['email', 'whatsapp', 'notify', 'TEMPLATES']
