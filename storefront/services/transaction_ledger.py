# storefront/services/transaction_ledger.py
import json
import uuid
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from enum import Enum

import redis

from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL, PAYMENT_TXN_TTL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

#LUA porownaj i usun, atomowo - zwalniamy tylko wlasny claim
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""


@dataclass
class PaymentTransaction:
    transaction_uuid: str
    amount: str
    product_code: str
    signature: str


class ClaimOutcome(str, Enum):
    CLAIMED = "claimed"
    UNKNOWN = "unknown"
    ALREADY_CLAIMED = "already_claimed"


@dataclass
class Claim:
    outcome: ClaimOutcome
    transaction: PaymentTransaction | None = None
    token: str | None = None


class TransactionLedger(ABC):
    """
    Rejestr transakcji relaya - transaction_uuid jest jednorazowy,
    callback z bramki mozna przetworzyc tylko raz.
    """

    @abstractmethod
    def record(self, txn: PaymentTransaction) -> None: ...

    @abstractmethod
    def claim(self, transaction_uuid: str) -> Claim: ...

    @abstractmethod
    def release(self, claim: Claim) -> None: ...


class RedisTransactionLedger(TransactionLedger):
    def __init__(self, url: str | None = None, ttl: int | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(url or REDIS_URL, decode_responses=True)
        self.ttl = ttl or PAYMENT_TXN_TTL_SECONDS

    @staticmethod
    def _txn_key(transaction_uuid: str) -> str:
        return f"payment:txn:{transaction_uuid}"

    @redis_retry()
    def record(self, txn: PaymentTransaction) -> None:
        self.redis.set(self._txn_key(txn.transaction_uuid), json.dumps(asdict(txn)), ex=self.ttl)

    @redis_retry()
    def claim(self, transaction_uuid: str) -> Claim:
        raw = self.redis.get(self._txn_key(transaction_uuid))
        if raw is None:
            return Claim(ClaimOutcome.UNKNOWN)

        txn = PaymentTransaction(**json.loads(raw))
        token = uuid.uuid4().hex
        #SET payment:txn:<uuid>:claimed <token> NX EX ttl
        claimed = self.redis.set(
            name=f"{self._txn_key(transaction_uuid)}:claimed",
            value=token,
            nx=True,
            ex=self.ttl,
        )
        if not claimed:
            return Claim(ClaimOutcome.ALREADY_CLAIMED, txn)
        return Claim(ClaimOutcome.CLAIMED, txn, token)

    @redis_retry()
    def release(self, claim: Claim) -> None:
        if claim.outcome != ClaimOutcome.CLAIMED:
            return
        key = f"{self._txn_key(claim.transaction.transaction_uuid)}:claimed"
        logger.info(f"Releasing claim on transaction {claim.transaction.transaction_uuid}")
        self.redis.eval(_RELEASE_LUA, 1, key, claim.token)


class InMemoryTransactionLedger(TransactionLedger):
    def __init__(self):
        self._transactions: dict[str, PaymentTransaction] = {}
        self._claims: dict[str, str] = {}

    def record(self, txn: PaymentTransaction) -> None:
        self._transactions[txn.transaction_uuid] = txn

    def claim(self, transaction_uuid: str) -> Claim:
        txn = self._transactions.get(transaction_uuid)
        if txn is None:
            return Claim(ClaimOutcome.UNKNOWN)
        if transaction_uuid in self._claims:
            return Claim(ClaimOutcome.ALREADY_CLAIMED, txn)
        token = uuid.uuid4().hex
        self._claims[transaction_uuid] = token
        return Claim(ClaimOutcome.CLAIMED, txn, token)

    def release(self, claim: Claim) -> None:
        if claim.outcome != ClaimOutcome.CLAIMED:
            return
        txn_id = claim.transaction.transaction_uuid
        if self._claims.get(txn_id) == claim.token:
            del self._claims[txn_id]


def build_ledger(url: str | None = None) -> TransactionLedger:
    url = url or REDIS_URL
    if url.startswith("memory://"):
        return InMemoryTransactionLedger()
    return RedisTransactionLedger(url)
