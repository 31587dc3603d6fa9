"""Request identity.

Authentication happens in front of this service; it forwards the caller's
account id in the ``X-Account-Id`` header. The account must exist and be
active. Dependencies are ``async`` so they run alongside the routes.
"""

from fastapi import Depends, Header
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.account.account import Account
from storefront.errors import Forbidden, Unauthorized


async def current_account(x_account_id: str | None = Header(default=None)) -> Account:
    if not x_account_id:
        raise Unauthorized("Not authorized, no token")
    try:
        account = current_domain.repository_for(Account).get(x_account_id)
    except ObjectNotFoundError as exc:
        raise Unauthorized("Not authorized, account not found") from exc
    if not account.is_active:
        raise Unauthorized("Account is deactivated")
    return account


async def optional_account(x_account_id: str | None = Header(default=None)) -> Account | None:
    if not x_account_id:
        return None
    return await current_account(x_account_id)


async def require_admin(account: Account = Depends(current_account)) -> Account:
    if not account.is_admin:
        raise Forbidden("Access denied. Admin privileges required.")
    return account
