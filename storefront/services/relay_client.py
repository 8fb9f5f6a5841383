# storefront/services/relay_client.py
from decimal import Decimal

import requests

from storefront.utils.settings import RELAY_URL, RELAY_TIMEOUT_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class RelayClient:
    """Klient relaya platnosci po stronie sklepu."""

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = (base_url or RELAY_URL).rstrip("/")
        self.timeout = timeout or RELAY_TIMEOUT_SECONDS

    @property
    def verify_url(self) -> str:
        return f"{self.base_url}/verify-payment"

    def initiate_payment(self, amount: Decimal, product_code: str, success_url: str, failure_url: str) -> str:
        url = f"{self.base_url}/initiate-payment"
        logger.info(f"RelayClient POST {url} amount={amount}")

        resp = requests.post(
            url,
            json={
                "amount": str(amount),
                "productId": product_code,
                "successUrl": success_url,
                "failureUrl": failure_url,
            },
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.json()["payment_url"]
