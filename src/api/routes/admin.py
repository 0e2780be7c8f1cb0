"""
Administrator endpoints. AdminService enforces the ADMIN role.
"""
from fastapi import APIRouter, Depends

from ..models import DataResponse, ListResponse, ErrorResponse, RoleUpdateRequest
from ..dependencies import get_admin_service, get_current_user
from ..services.admin_service import AdminService
from ...utils.models import UserProfile

router = APIRouter(prefix="/admin", tags=["admin"], responses={403: {"model": ErrorResponse}})


@router.get("/users", response_model=ListResponse)
async def all_users(user: UserProfile = Depends(get_current_user), service: AdminService = Depends(get_admin_service)):
    users = service.get_all_users(user)
    return {"success": True, "message": "Users", "data": [u.to_public_dict() for u in users]}


@router.put("/users/{user_id}/role", response_model=DataResponse, responses={404: {"model": ErrorResponse}})
async def update_role(
    user_id: str,
    req: RoleUpdateRequest,
    user: UserProfile = Depends(get_current_user),
    service: AdminService = Depends(get_admin_service),
):
    updated = service.update_user_role(user, user_id, req.role)
    return {"success": True, "message": "Role updated", "data": updated.to_public_dict()}


@router.get("/stats", response_model=DataResponse)
async def platform_stats(user: UserProfile = Depends(get_current_user), service: AdminService = Depends(get_admin_service)):
    stats = service.get_platform_stats(user)
    stats["bookings"] = [b.to_dict() for b in stats["bookings"]]
    return {"success": True, "message": "Platform stats", "data": stats}


@router.get("/verifications", response_model=ListResponse)
async def pending_verifications(user: UserProfile = Depends(get_current_user), service: AdminService = Depends(get_admin_service)):
    users = service.get_pending_verifications(user)
    return {"success": True, "message": "Pending verifications", "data": [u.to_public_dict() for u in users]}


@router.post("/verifications/{user_id}/approve", response_model=DataResponse, responses={404: {"model": ErrorResponse}})
async def approve(user_id: str, user: UserProfile = Depends(get_current_user), service: AdminService = Depends(get_admin_service)):
    updated = service.approve_host(user, user_id)
    return {"success": True, "message": "Identity verified", "data": updated.to_public_dict()}


@router.post("/verifications/{user_id}/reject", response_model=DataResponse, responses={404: {"model": ErrorResponse}})
async def reject(user_id: str, user: UserProfile = Depends(get_current_user), service: AdminService = Depends(get_admin_service)):
    updated = service.reject_verification(user, user_id)
    return {"success": True, "message": "Identity rejected", "data": updated.to_public_dict()}
