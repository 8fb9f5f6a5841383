# storefront/services/gateway_client.py
import requests

from storefront.utils.settings import PAYMENT_GATEWAY_URL, PAYMENT_TIMEOUT_SECONDS
from storefront.utils.retry import http_retry
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

FORM_PATH = "/api/epay/main/v2/form"
STATUS_PATH = "/api/epay/transaction/status/"


class GatewayClient:
    """Klient HTTP bramki platniczej (formularz + status transakcji)."""

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = (base_url or PAYMENT_GATEWAY_URL).rstrip("/")
        self.timeout = timeout or PAYMENT_TIMEOUT_SECONDS

    def submit_form(self, form: dict) -> str:
        """
        POST formularza platnosci. Bramka przekierowuje na swoja strone
        platnosci - zwracamy URL na ktorym skonczyl sie request.
        Bez retry: kazde wywolanie zaklada nowa sesje platnosci.
        """
        url = f"{self.base_url}{FORM_PATH}"
        logger.info(f"GatewayClient POST {url} for transaction {form.get('transaction_uuid')}")

        resp = requests.post(url, data=form, timeout=self.timeout, allow_redirects=True)
        resp.raise_for_status()
        return resp.url

    @http_retry()
    def transaction_status(self, product_code: str, total_amount: str, transaction_uuid: str) -> dict:
        url = f"{self.base_url}{STATUS_PATH}"
        params = {
            "product_code": product_code,
            "total_amount": total_amount,
            "transaction_uuid": transaction_uuid,
        }
        logger.info(f"GatewayClient GET {url} for transaction {transaction_uuid}")

        resp = requests.get(url, params=params, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()
