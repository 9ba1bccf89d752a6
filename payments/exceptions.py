from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.exceptions import APIException


class PaymentGatewayError(APIException):
    """Gateway call failed or returned an unusable response."""
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = _("Erro ao comunicar com o gateway de pagamento.")
    default_code = 'payment_gateway_error'


class PaymentGatewayUnavailable(PaymentGatewayError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = _("Configuração de pagamento indisponível.")
    default_code = 'payment_gateway_unavailable'
