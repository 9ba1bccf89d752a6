"""
Mercado Pago REST client.

Only the two calls the platform needs: creating a checkout preference and
fetching a payment referenced by a webhook notification.
"""

import logging

import requests
from django.conf import settings

from ..exceptions import PaymentGatewayError, PaymentGatewayUnavailable

logger = logging.getLogger(__name__)


class MercadoPagoClient:
    """
    USAGE:
        client = MercadoPagoClient()
        preference = client.create_preference(items=[...], metadata={...})
        payment = client.get_payment("1234567890")
    """

    def __init__(self, access_token=None, api_url=None, timeout=None):
        self._access_token = access_token if access_token is not None else settings.MERCADOPAGO_ACCESS_TOKEN
        self._api_url = (api_url or settings.MERCADOPAGO_API_URL).rstrip('/')
        self._timeout = timeout or settings.MERCADOPAGO_TIMEOUT

    @property
    def is_configured(self):
        return bool(self._access_token)

    def _headers(self):
        return {
            "Authorization": f"Bearer {self._access_token}",
            "Content-Type": "application/json",
        }

    def _ensure_configured(self):
        if not self.is_configured:
            logger.error("MERCADOPAGO_ACCESS_TOKEN is not configured")
            raise PaymentGatewayUnavailable()

    def create_preference(self, items, metadata, external_reference, notification_path='/api/payments/webhook/'):
        """
        Creates a checkout preference.

        Returns ``{"id": ..., "init_point": ...}``.
        """
        self._ensure_configured()
        base_url = settings.BASE_URL.rstrip('/')
        payload = {
            "items": items,
            "back_urls": {
                "success": f"{base_url}/status?payment=success",
                "failure": f"{base_url}/status?payment=failure",
                "pending": f"{base_url}/status?payment=pending",
            },
            "notification_url": f"{base_url}{notification_path}",
            "auto_return": "approved",
            "metadata": metadata,
            "external_reference": external_reference,
        }

        try:
            response = requests.post(
                f"{self._api_url}/checkout/preferences",
                headers=self._headers(),
                json=payload,
                timeout=self._timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.Timeout:
            logger.error(f"Mercado Pago timeout creating preference {external_reference}")
            raise PaymentGatewayError()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Mercado Pago error creating preference {external_reference}: {e}")
            raise PaymentGatewayError()

        logger.info(f"Mercado Pago preference {data.get('id')} created for {external_reference}")
        return {"id": data.get("id"), "init_point": data.get("init_point")}

    def get_payment(self, payment_id):
        """Payment resource as a dict, or ``None`` when the gateway does not know it."""
        self._ensure_configured()

        try:
            response = requests.get(
                f"{self._api_url}/v1/payments/{payment_id}",
                headers=self._headers(),
                timeout=self._timeout,
            )
        except requests.Timeout:
            logger.error(f"Mercado Pago timeout fetching payment {payment_id}")
            raise PaymentGatewayError()
        except requests.RequestException as e:
            logger.error(f"Mercado Pago error fetching payment {payment_id}: {e}")
            raise PaymentGatewayError()

        if response.status_code == 404:
            logger.warning(f"Mercado Pago payment {payment_id} not found")
            return None

        try:
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Mercado Pago invalid response for payment {payment_id}: {e}")
            raise PaymentGatewayError()
