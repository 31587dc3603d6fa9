"""All storefront routers, in mounting order."""

from storefront.api.accounts import account_router
from storefront.api.cart import cart_router
from storefront.api.catalogue import category_router, product_router
from storefront.api.errors import register_error_handlers
from storefront.api.orders import order_router
from storefront.api.reviews import review_router
from storefront.api.webhooks import webhook_router

routers = [
    account_router,
    category_router,
    product_router,
    review_router,
    cart_router,
    order_router,
    webhook_router,
]

__all__ = ["register_error_handlers", "routers"]
