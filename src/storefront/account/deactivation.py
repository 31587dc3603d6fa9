"""Account deactivation: command and handler.

Orders are the system of record and keep pointing at the account, so the
record is retired rather than removed. The cart goes away with it.
"""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.account.account import Account
from storefront.domain import storefront
from storefront.errors import Conflict

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Account")
class DeactivateAccount:
    account_id = Identifier(required=True)


@storefront.command_handler(part_of=Account)
class DeactivateAccountHandler:
    @handle(DeactivateAccount)
    def deactivate_account(self, command):
        from storefront.cart.cart import Cart
        from storefront.order.order import Order

        repo = current_domain.repository_for(Account)
        account = repo.get(command.account_id)

        if current_domain.repository_for(Order).has_open_orders_for_account(str(account.id)):
            raise Conflict("Cannot delete account with pending orders. Please wait for orders to complete.")

        cart_repo = current_domain.repository_for(Cart)
        cart = cart_repo.for_account(str(account.id))
        if cart is not None:
            cart_repo._dao.delete(cart)

        account.deactivate()
        repo.add(account)

        logger.info("Account deactivated", account_id=str(account.id))
