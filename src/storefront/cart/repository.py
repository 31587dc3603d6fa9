from storefront.cart.cart import Cart
from storefront.domain import storefront


@storefront.repository(part_of=Cart)
class CartRepository:
    def for_account(self, account_id: str) -> Cart | None:
        """Look up the account's cart without creating one."""
        carts = self._dao.query.filter(account_id=account_id).all().items
        return carts[0] if carts else None

    def get_or_create(self, account_id: str) -> Cart:
        """Return the account's cart, creating (and persisting) an empty one on first access."""
        cart = self.for_account(account_id)
        if cart is None:
            cart = Cart.create(account_id=account_id)
            self.add(cart)
        return cart
