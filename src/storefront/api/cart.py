"""Cart routes. Every response carries the cart as it stands after the change."""

import json

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.account.account import Account
from storefront.api.auth import current_account
from storefront.api.schemas import CartItemRequest, Envelope, SyncCartRequest
from storefront.api.serializers import cart_to_dict
from storefront.cart.cart import Cart
from storefront.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartItem
from storefront.cart.loading import LoadCart
from storefront.cart.sync import SyncCart
from storefront.catalogue.product import Product

cart_router = APIRouter(prefix="/cart", tags=["cart"])


def _cart_payload(account_id: str) -> dict:
    cart = current_domain.repository_for(Cart).get_or_create(account_id)
    product_repo = current_domain.repository_for(Product)
    products = {}
    for line in cart.items:
        product = product_repo.find_active(str(line.product_id))
        if product is not None:
            products[str(product.id)] = product
    return cart_to_dict(cart, products)


@cart_router.get("", response_model=Envelope)
async def get_cart(account: Account = Depends(current_account)) -> Envelope:
    current_domain.process(LoadCart(account_id=str(account.id)), asynchronous=False)
    return Envelope(data=_cart_payload(str(account.id)))


@cart_router.post("/add", response_model=Envelope)
async def add_to_cart(body: CartItemRequest, account: Account = Depends(current_account)) -> Envelope:
    command = AddToCart(account_id=str(account.id), product_id=body.product_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return Envelope(data=_cart_payload(str(account.id)), message="Item added to cart")


@cart_router.put("/update", response_model=Envelope)
async def update_cart_item(body: CartItemRequest, account: Account = Depends(current_account)) -> Envelope:
    command = UpdateCartItem(account_id=str(account.id), product_id=body.product_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return Envelope(data=_cart_payload(str(account.id)), message="Cart updated")


@cart_router.delete("/remove/{product_id}", response_model=Envelope)
async def remove_from_cart(product_id: str, account: Account = Depends(current_account)) -> Envelope:
    current_domain.process(RemoveFromCart(account_id=str(account.id), product_id=product_id), asynchronous=False)
    return Envelope(data=_cart_payload(str(account.id)), message="Item removed from cart")


@cart_router.delete("/clear", response_model=Envelope)
async def clear_cart(account: Account = Depends(current_account)) -> Envelope:
    current_domain.process(ClearCart(account_id=str(account.id)), asynchronous=False)
    return Envelope(data=_cart_payload(str(account.id)), message="Cart cleared")


@cart_router.post("/sync", response_model=Envelope)
async def sync_cart(body: SyncCartRequest, account: Account = Depends(current_account)) -> Envelope:
    items = json.dumps([item.model_dump() for item in body.items])
    errors = current_domain.process(SyncCart(account_id=str(account.id), items=items), asynchronous=False)
    data = _cart_payload(str(account.id))
    if errors:
        data["errors"] = errors
    return Envelope(data=data, message="Cart synchronized")
