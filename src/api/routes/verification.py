from fastapi import APIRouter, Depends, File, UploadFile

from ..models import DataResponse, ErrorResponse
from ..dependencies import get_verification_service, get_current_user
from ..services.verification_service import VerificationService
from ...utils.models import UserProfile

router = APIRouter(prefix="/verification", tags=["verification"])


@router.post(
    "/id-document",
    response_model=DataResponse,
    summary="Submit an identity document",
    description="Uploads the document and puts the profile in PENDING review",
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def submit_id_document(
    file: UploadFile = File(...),
    user: UserProfile = Depends(get_current_user),
    service: VerificationService = Depends(get_verification_service),
):
    content = await file.read()
    updated = service.submit_id_document(user.id, file.filename or "", content, file.content_type)
    return {"success": True, "message": "Document submitted", "data": updated.to_public_dict()}
