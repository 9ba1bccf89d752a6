from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.exceptions import APIException


class SlotUnavailable(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = _("Horário indisponível. Escolha outro horário.")
    default_code = 'slot_unavailable'


class UnlockRequired(APIException):
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    default_detail = _(
        "Desbloqueie esta solicitação ou assine um plano para aceitar novos clientes."
    )
    default_code = 'unlock_required'
