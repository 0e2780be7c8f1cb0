from fastapi import APIRouter, Depends

from ..models import DataResponse, ListResponse, ErrorResponse, MessageCreateRequest
from ..dependencies import get_messaging_service, get_current_user
from ..services.messaging_service import MessagingService
from ...utils.models import UserProfile

router = APIRouter(prefix="/messages", tags=["messages"])


@router.post("", response_model=DataResponse, status_code=201, responses={400: {"model": ErrorResponse}})
async def send_message(
    req: MessageCreateRequest,
    user: UserProfile = Depends(get_current_user),
    service: MessagingService = Depends(get_messaging_service),
):
    message = service.send_message(user.id, req.receiver_id, req.content, req.property_id)
    return {"success": True, "message": "Message sent", "data": message.to_dict()}


@router.get("/conversations", response_model=ListResponse)
async def conversations(user: UserProfile = Depends(get_current_user), service: MessagingService = Depends(get_messaging_service)):
    """Latest message per counterpart, most recent first."""
    entries = service.list_conversations(user.id)
    data = [{**e, "last_message": e["last_message"].to_dict()} for e in entries]
    return {"success": True, "message": "Conversations", "data": data}


@router.get("/unread-count", response_model=DataResponse)
async def unread_count(user: UserProfile = Depends(get_current_user), service: MessagingService = Depends(get_messaging_service)):
    return {"success": True, "message": "Unread messages", "data": {"count": service.get_unread_count(user.id)}}


@router.get("/{other_id}", response_model=ListResponse)
async def conversation(
    other_id: str,
    user: UserProfile = Depends(get_current_user),
    service: MessagingService = Depends(get_messaging_service),
):
    messages = service.get_conversation(user.id, other_id)
    return {"success": True, "message": "Conversation", "data": [m.to_dict() for m in messages]}


@router.post("/{other_id}/read", response_model=DataResponse)
async def mark_read(
    other_id: str,
    user: UserProfile = Depends(get_current_user),
    service: MessagingService = Depends(get_messaging_service),
):
    changed = service.mark_conversation_read(user.id, other_id)
    return {"success": True, "message": "Conversation marked as read", "data": {"updated": changed}}
