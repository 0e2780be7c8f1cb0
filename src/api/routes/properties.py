"""
Listing endpoints and per-listing iCal feeds.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse

from ..models import DataResponse, ListResponse, ErrorResponse, PropertyCreateRequest, PropertyUpdateRequest
from ..dependencies import get_property_service, get_current_user
from ..services.property_service import PropertyService
from ...utils.errors import NotFoundError, PermissionDeniedError
from ...utils.models import UserProfile, UserRole

router = APIRouter(prefix="/properties", tags=["properties"])


@router.get(
    "",
    response_model=DataResponse,
    summary="Search listings",
    description="Filter by category, price ceiling, rating, review count and location, paginated",
)
async def list_properties(
    category: Optional[str] = Query(None),
    max_price: Optional[float] = Query(None, ge=0),
    min_rating: Optional[float] = Query(None, ge=0, le=5),
    min_reviews: Optional[int] = Query(None, ge=0),
    location: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    service: PropertyService = Depends(get_property_service),
):
    result = service.list_properties(category, max_price, min_rating, min_reviews, location, page, limit)
    result["data"] = [p.to_dict() for p in result["data"]]
    return {"success": True, "message": "Properties", "data": result}


@router.get("/mine", response_model=ListResponse, responses={401: {"model": ErrorResponse}})
async def my_properties(user: UserProfile = Depends(get_current_user), service: PropertyService = Depends(get_property_service)):
    props = service.get_host_properties(user.id)
    return {"success": True, "message": "Host properties", "data": [p.to_dict() for p in props]}


@router.get("/{property_id}.ics", response_class=PlainTextResponse, responses={404: {"model": ErrorResponse}})
async def ical_feed(property_id: str, service: PropertyService = Depends(get_property_service)):
    """
    iCal export of approved and paid stays, for syncing with other calendars.
    """
    prop = service.get_property(property_id)
    if prop is None:
        raise NotFoundError("PROPERTY_NOT_FOUND", "Property not found", property_id=property_id)
    return PlainTextResponse(service.generate_ical_feed(prop), media_type="text/calendar")


@router.get("/{property_id}", response_model=DataResponse, responses={404: {"model": ErrorResponse}})
async def get_property(property_id: str, service: PropertyService = Depends(get_property_service)):
    prop = service.get_property(property_id)
    if prop is None:
        raise NotFoundError("PROPERTY_NOT_FOUND", "Property not found", property_id=property_id)
    data = prop.to_dict()
    data["ical_feed_url"] = service.ical_feed_url(prop.id)
    return {"success": True, "message": "Property", "data": data}


@router.get("/{property_id}/bookings", response_model=ListResponse)
async def property_bookings(property_id: str, service: PropertyService = Depends(get_property_service)):
    """Approved and paid stays, used to grey out the calendar."""
    bookings = service.get_confirmed_bookings(property_id)
    return {
        "success": True,
        "message": "Confirmed bookings",
        "data": [{"start_date": b.start_date.isoformat(), "end_date": b.end_date.isoformat(), "status": b.status.value} for b in bookings],
    }


@router.post("", response_model=DataResponse, status_code=201, responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}})
async def create_property(
    req: PropertyCreateRequest,
    user: UserProfile = Depends(get_current_user),
    service: PropertyService = Depends(get_property_service),
):
    if user.role not in (UserRole.HOST, UserRole.ADMIN):
        raise PermissionDeniedError("FORBIDDEN", "Switch to host mode to publish a listing.")
    prop = service.create_property(user.id, req.model_dump())
    return {"success": True, "message": "Property created", "data": prop.to_dict()}


@router.patch("/{property_id}", response_model=DataResponse, responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}})
async def update_property(
    property_id: str,
    req: PropertyUpdateRequest,
    user: UserProfile = Depends(get_current_user),
    service: PropertyService = Depends(get_property_service),
):
    prop = service.update_property(property_id, user, req.model_dump(exclude_unset=True))
    return {"success": True, "message": "Property updated", "data": prop.to_dict()}


@router.delete("/{property_id}", response_model=DataResponse, responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}})
async def delete_property(
    property_id: str,
    user: UserProfile = Depends(get_current_user),
    service: PropertyService = Depends(get_property_service),
):
    deleted = service.delete_property(property_id, user)
    return {"success": True, "message": "Property deleted", "data": {"id": property_id, "deleted": deleted}}
