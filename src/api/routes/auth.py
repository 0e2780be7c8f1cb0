"""
Registration, verification, sign-in and profile endpoints.
"""
from fastapi import APIRouter, HTTPException, Depends, Request

from ..models import (
    DataResponse, ErrorResponse, RegisterRequest, LoginRequest, VerifyCodeRequest, EmailRequest,
    ResetPasswordRequest, ProfileUpdateRequest,
)
from ..dependencies import get_logger, get_auth_service, get_current_user
from ..services.auth_service import AuthService
from ...utils.errors import MarketplaceError
from ...utils.models import UserProfile

router = APIRouter(prefix="/auth", tags=["auth"])


def _session(service: AuthService, user: UserProfile) -> dict:
    return {"token": service.issue_session_token(user), "user": user.to_public_dict()}


@router.post(
    "/register",
    response_model=DataResponse,
    summary="Create an account",
    description="Create an unverified account and email a verification code",
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def register(req: RegisterRequest, service: AuthService = Depends(get_auth_service)):
    logger = get_logger()
    try:
        user = service.register(req.full_name, req.email, req.phone, req.role, req.password)
        return {
            "success": True,
            "message": "Verification code sent",
            "data": {"user": user.to_public_dict(), "requires_verification": True},
        }
    except MarketplaceError:
        raise
    except Exception as e:
        logger.error("Registration failed", error=str(e))
        raise HTTPException(status_code=500, detail={"message": "Registration failed", "details": {"error": str(e)}})


@router.post(
    "/login",
    response_model=DataResponse,
    summary="Sign in",
    description="Verified accounts with a password receive a session token; everyone else gets an emailed code",
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def login(req: LoginRequest, service: AuthService = Depends(get_auth_service)):
    logger = get_logger()
    try:
        result = service.login(req.email, req.password)
        if result.requires_verification:
            return {
                "success": True,
                "message": "Verification code sent",
                "data": {"user": result.user.to_public_dict(), "requires_verification": True},
            }
        return {"success": True, "message": "Logged in", "data": {**_session(service, result.user), "requires_verification": False}}
    except MarketplaceError:
        raise
    except Exception as e:
        logger.error("Login failed", error=str(e))
        raise HTTPException(status_code=500, detail={"message": "Login failed", "details": {"error": str(e)}})


@router.post("/verify", response_model=DataResponse, responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}})
async def verify(req: VerifyCodeRequest, service: AuthService = Depends(get_auth_service)):
    """Check the emailed code, activate the account and open a session."""
    user = service.verify_account(req.email, req.code)
    return {"success": True, "message": "Account verified", "data": _session(service, user)}


@router.post("/resend-code", response_model=DataResponse, responses={404: {"model": ErrorResponse}})
async def resend_code(req: EmailRequest, service: AuthService = Depends(get_auth_service)):
    service.resend_code(req.email)
    return {"success": True, "message": "Verification code sent", "data": {"email": req.email}}


@router.post("/logout", response_model=DataResponse)
async def logout(request: Request):
    logger = get_logger()
    user_id = getattr(request.state, "user_id", None)
    logger.info("user_logged_out", user_id=user_id)
    return {"success": True, "message": "Logged out", "data": {"logged_out": True}}


@router.get("/me", response_model=DataResponse, responses={401: {"model": ErrorResponse}})
async def me(user: UserProfile = Depends(get_current_user)):
    return {"success": True, "message": "Profile", "data": user.to_public_dict()}


@router.put("/profile", response_model=DataResponse, responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}})
async def update_profile(
    req: ProfileUpdateRequest,
    user: UserProfile = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    updated = service.update_profile(user.id, req.model_dump(exclude_none=True))
    return {"success": True, "message": "Profile updated", "data": updated.to_public_dict()}


@router.post("/switch-role", response_model=DataResponse, responses={401: {"model": ErrorResponse}})
async def switch_role(user: UserProfile = Depends(get_current_user), service: AuthService = Depends(get_auth_service)):
    """Toggle between traveler and host mode."""
    updated = service.switch_role(user.id)
    return {"success": True, "message": f"Role is now {updated.role.value}", "data": _session(service, updated)}


@router.post("/forgot-password", response_model=DataResponse, responses={404: {"model": ErrorResponse}})
async def forgot_password(req: EmailRequest, service: AuthService = Depends(get_auth_service)):
    service.request_password_reset(req.email)
    return {"success": True, "message": "Reset link sent", "data": {"email": req.email}}


@router.post("/reset-password", response_model=DataResponse, responses={400: {"model": ErrorResponse}})
async def reset_password(req: ResetPasswordRequest, service: AuthService = Depends(get_auth_service)):
    user = service.reset_password(req.token, req.new_password)
    return {"success": True, "message": "Password updated", "data": {"email": user.email}}
