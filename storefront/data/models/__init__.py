#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w Base.metadata

from storefront.data.models.category import CategoryModel
from storefront.data.models.product import ProductModel
from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.customer_detail import CustomerDetailModel
from storefront.data.models.order import OrderModel
from storefront.data.models.guest_order import GuestOrderModel
from storefront.data.models.pending_checkout import PendingCheckoutModel

__all__ = [
    "CategoryModel",
    "ProductModel",
    "CartItemModel",
    "CustomerDetailModel",
    "OrderModel",
    "GuestOrderModel",
    "PendingCheckoutModel",
]
