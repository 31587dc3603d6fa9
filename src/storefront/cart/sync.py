"""Cart synchronisation: replace the cart with a client-side copy.

Lines that cannot be honoured are dropped and reported back as messages; the
command itself succeeds as long as the input is well formed.
"""

import json
from collections import OrderedDict

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.catalogue.product import Product
from storefront.domain import storefront


@storefront.command(part_of="Cart")
class SyncCart:
    account_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {product_id, quantity}


def _merge_client_lines(raw_lines) -> OrderedDict:
    """Collapse repeated products into one requested quantity each."""
    if not isinstance(raw_lines, list):
        raise ValidationError({"items": ["Items must be a list"]})

    requested = OrderedDict()
    for raw in raw_lines:
        if not isinstance(raw, dict) or not raw.get("product_id"):
            raise ValidationError({"items": ["Each item needs a product_id"]})
        product_id = str(raw["product_id"])
        quantity = raw.get("quantity", 1)
        if not isinstance(quantity, int) or quantity < 1:
            raise ValidationError({"items": [f"Invalid quantity for product {product_id}"]})
        requested[product_id] = requested.get(product_id, 0) + quantity
    return requested


@storefront.command_handler(part_of=Cart)
class SyncCartHandler:
    @handle(SyncCart)
    def sync_cart(self, command):
        requested = _merge_client_lines(json.loads(command.items))

        product_repo = current_domain.repository_for(Product)
        accepted = []
        errors = []
        for product_id, quantity in requested.items():
            product = product_repo.find_active(product_id)
            if product is None:
                errors.append(f"Product {product_id} not found or inactive")
                continue
            if not product.has_stock_for(quantity):
                errors.append(f"Only {product.stock_quantity} items available for {product.name}")
                continue
            accepted.append((product_id, quantity, product.price))

        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_create(command.account_id)
        cart.replace_lines(accepted)
        repo.add(cart)

        return errors
