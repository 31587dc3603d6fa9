"""Loading the caller's cart, pruned of products that can no longer be bought."""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.catalogue.product import Product
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Cart")
class LoadCart:
    account_id = Identifier(required=True)


@storefront.command_handler(part_of=Cart)
class LoadCartHandler:
    @handle(LoadCart)
    def load_cart(self, command):
        """Return the cart id after dropping lines for missing or inactive products."""
        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_create(command.account_id)

        product_repo = current_domain.repository_for(Product)
        dropped = cart.prune(lambda product_id: product_repo.find_active(product_id) is not None)
        if dropped:
            logger.info(
                "Dropped unavailable products from cart",
                account_id=command.account_id,
                product_ids=dropped,
            )
            repo.add(cart)

        return str(cart.id)
