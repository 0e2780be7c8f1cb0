"""
Booking endpoints: pricing, availability, reservations and host dashboards.
"""
from datetime import date

from fastapi import APIRouter, Depends, Query

from ..models import DataResponse, ListResponse, ErrorResponse, BookingCreateRequest, BookingStatusRequest
from ..dependencies import get_booking_service, get_property_service, get_current_user
from ..services.booking_service import BookingService
from ..services.property_service import PropertyService
from ...utils.models import UserProfile
from ...utils.pricing import format_currency

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get(
    "/quote",
    response_model=DataResponse,
    summary="Price a stay",
    description="Traveler total, host payout and platform revenue for the given dates",
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def quote(
    property_id: str = Query(...),
    start_date: date = Query(...),
    end_date: date = Query(...),
    service: BookingService = Depends(get_booking_service),
):
    pricing = service.quote(property_id, start_date, end_date)
    data = pricing.to_dict()
    data["total_formatted"] = format_currency(pricing.total_client)
    return {"success": True, "message": "Quote", "data": data}


@router.get("/availability", response_model=DataResponse)
async def availability(
    property_id: str = Query(...),
    start_date: date = Query(...),
    end_date: date = Query(...),
    service: BookingService = Depends(get_booking_service),
):
    available = service.is_range_available(property_id, start_date, end_date)
    return {"success": True, "message": "Availability", "data": {"available": available}}


@router.post(
    "",
    response_model=DataResponse,
    status_code=201,
    summary="Book a stay",
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def create_booking(
    req: BookingCreateRequest,
    user: UserProfile = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.create_booking(user.id, req.property_id, req.start_date, req.end_date, req.payment_method)
    return {"success": True, "message": "Booking requested", "data": booking.to_dict()}


@router.get("/mine", response_model=ListResponse)
async def my_bookings(user: UserProfile = Depends(get_current_user), service: BookingService = Depends(get_booking_service)):
    bookings = service.get_user_bookings(user.id)
    return {"success": True, "message": "Traveler bookings", "data": [b.to_dict() for b in bookings]}


@router.get("/host", response_model=ListResponse)
async def host_bookings(user: UserProfile = Depends(get_current_user), service: BookingService = Depends(get_booking_service)):
    bookings = service.get_host_bookings(user.id)
    return {"success": True, "message": "Host bookings", "data": [b.to_dict() for b in bookings]}


@router.get("/host/revenue", response_model=DataResponse)
async def host_revenue(
    user: UserProfile = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
    property_service: PropertyService = Depends(get_property_service),
):
    """Earnings after commission over approved and paid stays."""
    property_ids = [p.id for p in property_service.get_host_properties(user.id)]
    revenue = service.get_host_revenue(property_ids)
    return {
        "success": True,
        "message": "Host revenue",
        "data": {"revenue": revenue, "formatted": format_currency(revenue), "properties": len(property_ids)},
    }


@router.patch(
    "/{booking_id}/status",
    response_model=DataResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_status(
    booking_id: str,
    req: BookingStatusRequest,
    user: UserProfile = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.update_booking_status(booking_id, req.status, user)
    return {"success": True, "message": f"Booking {booking.status.value}", "data": booking.to_dict()}
