"""Account routes: registration, profile and self-service deletion."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.account.account import Account
from storefront.account.deactivation import DeactivateAccount
from storefront.account.registration import RegisterAccount
from storefront.api.auth import current_account
from storefront.api.schemas import Envelope, RegisterAccountRequest
from storefront.api.serializers import account_to_dict

account_router = APIRouter(prefix="/accounts", tags=["accounts"])


@account_router.post("", status_code=201, response_model=Envelope)
async def register_account(body: RegisterAccountRequest) -> Envelope:
    command = RegisterAccount(name=body.name, email=body.email, phone=body.phone)
    account_id = current_domain.process(command, asynchronous=False)
    account = current_domain.repository_for(Account).get(account_id)
    return Envelope(data=account_to_dict(account), message="Account registered")


@account_router.get("/me", response_model=Envelope)
async def get_me(account: Account = Depends(current_account)) -> Envelope:
    return Envelope(data=account_to_dict(account))


@account_router.delete("/me", response_model=Envelope)
async def delete_me(account: Account = Depends(current_account)) -> Envelope:
    current_domain.process(DeactivateAccount(account_id=str(account.id)), asynchronous=False)
    return Envelope(message="Account deleted successfully")
