# storefront/services/cart_service.py
from decimal import Decimal
from typing import Any, Dict, List

from storefront.domain.schemas import CartLine
from storefront.repos.cart_repo import CartRepository
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def cart_total(lines: List[CartLine]) -> Decimal:
    return sum((line.subtotal for line in lines), Decimal("0.00"))


class CartService:
    """
    Use case'y koszyka niezalezne od tego gdzie koszyk jest trzymany.
    Kazda komenda konczy sie pelnym odczytem koszyka (read-after-write).
    """

    def __init__(self, repo: CartRepository, products: ProductRepo):
        self.repo = repo
        self.products = products

    #query
    def get_cart(self) -> Dict[str, Any]:
        lines = self.repo.list_lines()
        return {
            "owner_ref": self.repo.owner_ref,
            "items": lines,
            "total": cart_total(lines),
        }

    def _snapshot(self, product_id: int) -> CartLine:
        product = self.products.get_product(product_id)
        if not product:
            raise LookupError(f"Produkt {product_id} nie istnieje")
        return CartLine(
            product_id=product.id,
            name=product.name,
            price=product.price,
            image=product.image or "",
            quantity=1,
        )

    #commands
    def add(self, product_id: int, snapshot: CartLine | None = None) -> Dict[str, Any]:
        existing = self.repo.get_line(product_id)

        if existing:
            logger.info(
                f"Product {product_id} already in cart of {self.repo.owner_ref or 'guest'}, "
                f"quantity {existing.quantity} -> {existing.quantity + 1}"
            )
            existing.quantity += 1
            self.repo.save_line(existing)
        else:
            line = snapshot.model_copy(update={"quantity": 1}) if snapshot else self._snapshot(product_id)
            logger.info(f"Adding product {product_id} to cart of {self.repo.owner_ref or 'guest'}")
            self.repo.save_line(line)

        return self.get_cart()

    def set_quantity(self, product_id: int, quantity: int) -> Dict[str, Any]:
        if quantity <= 0:
            return self.remove(product_id)

        line = self.repo.get_line(product_id) or self._snapshot(product_id)
        line.quantity = quantity
        self.repo.save_line(line)
        return self.get_cart()

    def remove(self, product_id: int) -> Dict[str, Any]:
        # brak pozycji = no-op
        self.repo.delete_line(product_id)
        return self.get_cart()

    def clear(self) -> Dict[str, Any]:
        logger.info(f"Clearing cart of {self.repo.owner_ref or 'guest'}")
        self.repo.delete_all()
        return self.get_cart()


def transfer_on_login(guest_repo: CartRepository, user_repo: CartRepository) -> List[CartLine]:
    """
    Przeniesienie koszyka goscia po zalogowaniu. Ilosci tych samych
    produktow sa sumowane, koszyk goscia jest czyszczony.
    """
    guest_lines = guest_repo.list_lines()
    if not guest_lines:
        return user_repo.list_lines()

    for line in guest_lines:
        existing = user_repo.get_line(line.product_id)
        if existing:
            existing.quantity += line.quantity
            user_repo.save_line(existing)
        else:
            user_repo.save_line(line)

    guest_repo.delete_all()
    logger.info(f"Transferred {len(guest_lines)} guest cart lines to user {user_repo.owner_ref}")
    return user_repo.list_lines()
