# storefront/repos/cart_repo.py
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from storefront.data.models.cart_item import CartItemModel
from storefront.domain.schemas import CartLine
from storefront.services.device_storage import DeviceStorage, GUEST_CART_SLOT
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartRepository(ABC):
    """Koszyk jednego wlasciciela - urzadzenia goscia albo zalogowanego uzytkownika."""

    owner_ref: str | None = None

    @abstractmethod
    def list_lines(self) -> List[CartLine]: ...

    @abstractmethod
    def save_line(self, line: CartLine) -> None:
        """Upsert po product_id."""

    @abstractmethod
    def delete_line(self, product_id: int) -> None: ...

    @abstractmethod
    def delete_all(self) -> None: ...

    def get_line(self, product_id: int) -> CartLine | None:
        for line in self.list_lines():
            if line.product_id == product_id:
                return line
        return None


class LocalDeviceCartRepository(CartRepository):
    def __init__(self, storage: DeviceStorage, device_id: str):
        self.storage = storage
        self.device_id = device_id

    def list_lines(self) -> List[CartLine]:
        raw = self.storage.read_json(self.device_id, GUEST_CART_SLOT, default=[])
        if not isinstance(raw, list):
            logger.warning(f"Guest cart for device {self.device_id} is not a list, returning empty")
            return []
        return [CartLine.model_validate(row) for row in raw]

    def _write(self, lines: List[CartLine]) -> None:
        self.storage.write_json(
            self.device_id,
            GUEST_CART_SLOT,
            [line.model_dump(mode="json") for line in lines],
        )

    def save_line(self, line: CartLine) -> None:
        lines = [other for other in self.list_lines() if other.product_id != line.product_id]
        lines.append(line)
        self._write(lines)

    def delete_line(self, product_id: int) -> None:
        lines = self.list_lines()
        remaining = [other for other in lines if other.product_id != product_id]
        if len(remaining) != len(lines):
            self._write(remaining)

    def delete_all(self) -> None:
        self.storage.remove_item(self.device_id, GUEST_CART_SLOT)


class RemoteUserCartRepository(CartRepository):
    def __init__(self, db: Session, user_id: str):
        self.db = db
        self.user_id = user_id
        self.owner_ref = user_id

    def list_lines(self) -> List[CartLine]:
        rows = self.db.execute(
            select(CartItemModel)
            .where(CartItemModel.user_id == self.user_id)
            .order_by(CartItemModel.id)
        ).scalars().all()

        lines = []
        for row in rows:
            product = row.product
            #produkt usuniety z katalogu - zostaje minimalna pozycja
            lines.append(
                CartLine(
                    product_id=row.product_id,
                    name=product.name if product else "",
                    price=product.price if product else Decimal("0.00"),
                    image=product.image if product else "",
                    quantity=row.quantity,
                )
            )
        return lines

    def _get_row(self, product_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.user_id == self.user_id,
                CartItemModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def save_line(self, line: CartLine) -> None:
        row = self._get_row(line.product_id)
        if row:
            row.quantity = line.quantity
        else:
            self.db.add(
                CartItemModel(
                    user_id=self.user_id,
                    product_id=line.product_id,
                    quantity=line.quantity,
                )
            )
        self.db.commit()

    def delete_line(self, product_id: int) -> None:
        self.db.execute(
            delete(CartItemModel).where(
                CartItemModel.user_id == self.user_id,
                CartItemModel.product_id == product_id,
            )
        )
        self.db.commit()

    def delete_all(self) -> None:
        self.db.execute(delete(CartItemModel).where(CartItemModel.user_id == self.user_id))
        self.db.commit()


def cart_repository_for(
    db: Session,
    storage: DeviceStorage,
    device_id: str,
    user_id: str | None,
) -> CartRepository:
    """Wybor repozytorium raz, na starcie sesji."""
    if user_id:
        return RemoteUserCartRepository(db, user_id)
    return LocalDeviceCartRepository(storage, device_id)
