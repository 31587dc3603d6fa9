"""Account registration: command and handler."""

from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from storefront.account.account import Account, Role
from storefront.domain import storefront


@storefront.command(part_of="Account")
class RegisterAccount:
    name = String(required=True, max_length=50)
    email = String(required=True, max_length=254)
    role = String(max_length=20, default=Role.CUSTOMER.value)
    phone = String(max_length=20)


@storefront.command_handler(part_of=Account)
class RegisterAccountHandler:
    @handle(RegisterAccount)
    def register_account(self, command):
        account = Account.register(
            name=command.name,
            email=command.email,
            role=command.role,
            phone=command.phone,
        )
        current_domain.repository_for(Account).add(account)
        return str(account.id)
