from fastapi import APIRouter, Depends

from ..models import DataResponse, ListResponse, ErrorResponse, PayoutSettingsRequest
from ..dependencies import get_payout_service, get_current_user
from ..services.payout_service import PayoutService, mask_account
from ...utils.models import UserProfile

router = APIRouter(prefix="/payouts", tags=["payouts"])


def _public_settings(settings) -> dict:
    data = settings.to_dict()
    data["account_number"] = mask_account(settings.account_number)
    return data


@router.get("/settings", response_model=DataResponse)
async def get_settings(user: UserProfile = Depends(get_current_user), service: PayoutService = Depends(get_payout_service)):
    """Payout destination with the account number masked."""
    settings = service.get_settings(user.id)
    return {"success": True, "message": "Payout settings", "data": _public_settings(settings) if settings else None}


@router.put("/settings", response_model=DataResponse, responses={400: {"model": ErrorResponse}})
async def save_settings(
    req: PayoutSettingsRequest,
    user: UserProfile = Depends(get_current_user),
    service: PayoutService = Depends(get_payout_service),
):
    settings = service.upsert_settings(user.id, req.method, req.account_name, req.account_number)
    return {"success": True, "message": "Payout settings saved", "data": _public_settings(settings)}


@router.get("/history", response_model=ListResponse)
async def history(user: UserProfile = Depends(get_current_user), service: PayoutService = Depends(get_payout_service)):
    records = service.get_host_payouts(user.id)
    return {"success": True, "message": "Payout history", "data": [r.to_dict() for r in records]}
