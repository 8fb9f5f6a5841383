# storefront/services/signature.py
import base64
import hashlib
import hmac
from typing import Sequence, Tuple

REQUEST_SIGNED_FIELDS = ("total_amount", "transaction_uuid", "product_code")
CALLBACK_SIGNED_FIELDS = ("transaction_code", "status", "total_amount", "transaction_uuid", "product_code")


def sign(secret: str, message: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def signing_message(pairs: Sequence[Tuple[str, object]]) -> str:
    """Kolejnosc pol ma znaczenie: "k1=v1,k2=v2,..."."""
    return ",".join(f"{name}={value}" for name, value in pairs)


def request_signature(secret: str, amount, transaction_uuid: str, product_code: str) -> str:
    message = signing_message([
        ("total_amount", amount),
        ("transaction_uuid", transaction_uuid),
        ("product_code", product_code),
    ])
    return sign(secret, message)


def callback_signature(secret: str, callback: dict) -> str:
    pairs = [(name, callback[name]) for name in CALLBACK_SIGNED_FIELDS]
    message = signing_message(pairs) + ",signed_field_names=" + ",".join(CALLBACK_SIGNED_FIELDS)
    return sign(secret, message)


def signatures_match(expected: str, supplied: str) -> bool:
    return hmac.compare_digest(expected.encode("utf-8"), (supplied or "").encode("utf-8"))
