# storefront/services/payment_relay_service.py
import base64
import binascii
import json
import uuid
from decimal import Decimal, InvalidOperation
from urllib.parse import urlencode

import redis
from pydantic import ValidationError

from storefront.domain.schemas import PaymentCallback
from storefront.services import signature
from storefront.services.gateway_client import GatewayClient
from storefront.services.transaction_ledger import Claim, ClaimOutcome, PaymentTransaction, TransactionLedger
from storefront.utils.settings import (
    PAYMENT_FAILURE_URL,
    PAYMENT_MERCHANT_SECRET,
    PAYMENT_SUCCESS_URL,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

STATUS_COMPLETE = "COMPLETE"

NO_DATA = "No payment data received."
INVALID_DATA = "Invalid payment data."
INVALID_SIGNATURE = "Invalid signature."
UNKNOWN_TRANSACTION = "Unknown transaction."
ALREADY_PROCESSED = "Payment already processed."
AMOUNT_MISMATCH = "Amount mismatch."
VERIFY_FAILED = "Failed to verify payment"


class RelayError(Exception):
    pass


def _same_amount(recorded: str, reported: str) -> bool:
    try:
        return Decimal(recorded) == Decimal(reported)
    except InvalidOperation:
        return False


class PaymentRelayService:
    """
    Podpisywanie zadan do bramki i weryfikacja callbackow.
    Stan miedzy wywolaniami trzyma tylko ledger transakcji.
    """

    def __init__(
        self,
        ledger: TransactionLedger,
        gateway: GatewayClient,
        secret: str | None = None,
        success_url: str | None = None,
        failure_url: str | None = None,
    ):
        self.ledger = ledger
        self.gateway = gateway
        self.secret = secret or PAYMENT_MERCHANT_SECRET
        self.success_url = success_url or PAYMENT_SUCCESS_URL
        self.failure_url = failure_url or PAYMENT_FAILURE_URL

    def initiate(self, amount: Decimal, product_code: str, success_url: str, failure_url: str) -> str:
        transaction_uuid = str(uuid.uuid4())
        total = str(amount)
        sig = signature.request_signature(self.secret, total, transaction_uuid, product_code)

        form = {
            "amount": total,
            "failure_url": failure_url,
            "product_delivery_charge": "0",
            "product_service_charge": "0",
            "product_code": product_code,
            "signature": sig,
            "signed_field_names": ",".join(signature.REQUEST_SIGNED_FIELDS),
            "success_url": success_url,
            "tax_amount": "0",
            "total_amount": total,
            "transaction_uuid": transaction_uuid,
        }

        try:
            payment_url = self.gateway.submit_form(form)
        except Exception as e:
            logger.error(f"Error initiating payment {transaction_uuid}: {e}")
            raise RelayError("Failed to initiate payment") from e

        try:
            self.ledger.record(
                PaymentTransaction(
                    transaction_uuid=transaction_uuid,
                    amount=total,
                    product_code=product_code,
                    signature=sig,
                )
            )
        except redis.RedisError as e:
            # sesja w bramce istnieje, ale callbacku nie dalibysmy rady zweryfikowac
            logger.error(f"Could not record payment {transaction_uuid} (gateway session {payment_url}): {e}")
            raise RelayError("Failed to initiate payment") from e
        logger.info(f"Payment {transaction_uuid} initiated for {total} ({product_code})")
        return payment_url

    def success_redirect(self) -> str:
        return f"{self.success_url}?{urlencode({'status': 'success'})}"

    def failure_redirect(self, message: str) -> str:
        return f"{self.failure_url}?{urlencode({'message': message})}"

    def _release(self, claim: Claim) -> None:
        try:
            self.ledger.release(claim)
        except redis.RedisError as e:
            # claim wygasnie po TTL
            logger.error(f"Could not release claim on {claim.transaction.transaction_uuid}: {e}")

    @staticmethod
    def decode_callback(data: str) -> PaymentCallback:
        raw = base64.b64decode(data, validate=False)
        return PaymentCallback.model_validate(json.loads(raw.decode("utf-8")))

    def verify(self, data: str | None) -> str:
        """Zwraca URL przekierowania przegladarki (sukces albo porazka)."""
        if not data:
            return self.failure_redirect(NO_DATA)

        try:
            callback = self.decode_callback(data)
        except (binascii.Error, UnicodeDecodeError, ValueError, ValidationError) as e:
            logger.warning(f"Undecodable payment callback: {e}")
            return self.failure_redirect(INVALID_DATA)

        expected = signature.callback_signature(self.secret, callback.model_dump())
        if not signature.signatures_match(expected, callback.signature):
            logger.warning(f"Invalid signature for transaction {callback.transaction_uuid}")
            return self.failure_redirect(INVALID_SIGNATURE)

        try:
            claim = self.ledger.claim(callback.transaction_uuid)
        except redis.RedisError as e:
            logger.error(f"Ledger unavailable while verifying {callback.transaction_uuid}: {e}")
            return self.failure_redirect(VERIFY_FAILED)

        if claim.outcome == ClaimOutcome.UNKNOWN:
            logger.warning(f"Callback for unknown transaction {callback.transaction_uuid}")
            return self.failure_redirect(UNKNOWN_TRANSACTION)
        if claim.outcome == ClaimOutcome.ALREADY_CLAIMED:
            logger.warning(f"Replayed callback for transaction {callback.transaction_uuid}")
            return self.failure_redirect(ALREADY_PROCESSED)

        if not _same_amount(claim.transaction.amount, callback.total_amount):
            logger.warning(
                f"Amount mismatch for {callback.transaction_uuid}: "
                f"recorded {claim.transaction.amount}, callback {callback.total_amount}"
            )
            return self.failure_redirect(AMOUNT_MISMATCH)

        try:
            status = self.gateway.transaction_status(
                product_code=callback.product_code,
                total_amount=callback.total_amount,
                transaction_uuid=callback.transaction_uuid,
            )
        except Exception as e:
            # transakcja moze byc zweryfikowana ponownie
            logger.error(f"Error verifying payment {callback.transaction_uuid}: {e}")
            self._release(claim)
            return self.failure_redirect(VERIFY_FAILED)

        reported = str(status.get("status", ""))
        if reported == STATUS_COMPLETE:
            logger.info(f"Payment {callback.transaction_uuid} confirmed")
            return self.success_redirect()

        logger.info(f"Payment {callback.transaction_uuid} reported as {reported}")
        self._release(claim)
        return self.failure_redirect(reported)
