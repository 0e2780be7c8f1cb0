from fastapi import APIRouter, Depends

from ..models import DataResponse, TravelAdviceRequest, SmartSearchRequest
from ..dependencies import get_concierge
from ...llm.concierge import ConciergeManager

router = APIRouter(prefix="/concierge", tags=["concierge"])


@router.post(
    "/advice",
    response_model=DataResponse,
    summary="Ask the travel concierge",
    description="Local recommendations with the web sources they were grounded on",
)
async def travel_advice(req: TravelAdviceRequest, concierge: ConciergeManager = Depends(get_concierge)):
    location = None
    if req.latitude is not None and req.longitude is not None:
        location = (req.latitude, req.longitude)
    advice = concierge.get_travel_advice(req.prompt, location)
    return {"success": True, "message": "Concierge answer", "data": advice}


@router.post("/smart-search", response_model=DataResponse)
async def smart_search(req: SmartSearchRequest, concierge: ConciergeManager = Depends(get_concierge)):
    """Map a free-text search to the closest category id."""
    category = concierge.parse_smart_search(req.query, req.categories)
    return {"success": True, "message": "Category", "data": {"category": category}}
