"""Cart line management: commands and handler.

Every handler works on the caller's own cart, creating it lazily. Adds and
updates validate against live product data and refresh the line's price.
"""

from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.errors import InsufficientStock, NotFound


@storefront.command(part_of="Cart")
class AddToCart:
    account_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="Cart")
class UpdateCartItem:
    account_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="Cart")
class RemoveFromCart:
    account_id = Identifier(required=True)
    product_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class ClearCart:
    account_id = Identifier(required=True)


def _purchasable_product(product_id) -> Product:
    product = current_domain.repository_for(Product).find_active(product_id)
    if product is None:
        raise NotFound("Product not found or inactive")
    return product


def _check_stock(product: Product, quantity: int):
    if not product.has_stock_for(quantity):
        raise InsufficientStock(product.name, product.stock_quantity, quantity)


@storefront.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_create(command.account_id)
        product = _purchasable_product(command.product_id)

        _check_stock(product, cart.quantity_of(product.id) + command.quantity)

        cart.add_product(str(product.id), command.quantity, product.price)
        repo.add(cart)

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_create(command.account_id)
        product = _purchasable_product(command.product_id)

        if cart.line_for(product.id) is None:
            raise NotFound("Item not found in cart")
        _check_stock(product, command.quantity)

        cart.set_quantity(str(product.id), command.quantity, product.price)
        repo.add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_create(command.account_id)
        cart.remove_product(command.product_id)
        repo.add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_create(command.account_id)
        cart.clear()
        repo.add(cart)
