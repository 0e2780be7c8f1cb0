"""
Payment proof upload and administrator review.
"""
from fastapi import APIRouter, Depends, File, Form, UploadFile

from ..models import DataResponse, ListResponse, ErrorResponse, ProofReviewRequest
from ..dependencies import get_payment_service, get_current_user
from ..services.payment_service import PaymentService
from ...utils.models import UserProfile, PaymentMethod

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post(
    "/proofs",
    response_model=DataResponse,
    status_code=201,
    summary="Upload a transfer proof",
    description="Image or PDF of a BaridiMob/RIB transfer; stays PENDING until an administrator reviews it",
    responses={
        400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def upload_proof(
    booking_id: str = Form(...),
    amount: float = Form(..., ge=0),
    payment_method: PaymentMethod = Form(...),
    file: UploadFile = File(...),
    user: UserProfile = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service),
):
    content = await file.read()
    proof = service.upload_payment_proof(
        user.id, booking_id, amount, payment_method, file.filename or "", content, file.content_type
    )
    return {"success": True, "message": "Proof uploaded", "data": proof.to_dict()}


@router.get("/proofs/pending", response_model=ListResponse, responses={403: {"model": ErrorResponse}})
async def pending_proofs(user: UserProfile = Depends(get_current_user), service: PaymentService = Depends(get_payment_service)):
    proofs = service.get_pending_proofs(user)
    return {"success": True, "message": "Pending proofs", "data": [p.to_dict() for p in proofs]}


@router.post(
    "/proofs/{proof_id}/review",
    response_model=DataResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def review_proof(
    proof_id: str,
    req: ProofReviewRequest,
    user: UserProfile = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service),
):
    proof = service.review_payment_proof(user, proof_id, req.approve, req.rejection_reason)
    return {"success": True, "message": f"Proof {proof.status.value}", "data": proof.to_dict()}
