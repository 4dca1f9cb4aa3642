"""
api/routes/v1/accounts.py -- Account lookup.

Routes:
  GET /api/v1/accounts/{account_id}  -- public profile of any account (requires auth)

400 invalid_id for a malformed id, 404 if no such account. The response is
built from PublicAccount and never contains the password hash.
"""

from fastapi import APIRouter, Depends, Request

from api.models import AccountResponse
from auth.dependencies import get_current_account
from auth.service import AccountService

router = APIRouter(dependencies=[Depends(get_current_account)])


@router.get("/accounts/{account_id}", response_model=AccountResponse)
def get_account(request: Request, account_id: str) -> AccountResponse:
    service: AccountService = request.app.state.account_service
    return AccountResponse.from_account(service.get_by_id(account_id))
