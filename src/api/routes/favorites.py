from fastapi import APIRouter, Depends

from ..models import DataResponse, ListResponse
from ..dependencies import get_favorite_service, get_current_user
from ..services.favorite_service import FavoriteService
from ...utils.models import UserProfile

router = APIRouter(prefix="/favorites", tags=["favorites"])


@router.get("", response_model=ListResponse)
async def list_favorites(user: UserProfile = Depends(get_current_user), service: FavoriteService = Depends(get_favorite_service)):
    favorites = service.get_favorites(user.id)
    return {"success": True, "message": "Favorites", "data": [f.to_dict() for f in favorites]}


@router.get("/ids", response_model=DataResponse)
async def favorite_ids(user: UserProfile = Depends(get_current_user), service: FavoriteService = Depends(get_favorite_service)):
    ids = service.get_user_favorite_property_ids(user.id)
    return {"success": True, "message": "Favorite property ids", "data": {"property_ids": ids}}


@router.get("/{property_id}", response_model=DataResponse)
async def is_favorite(
    property_id: str,
    user: UserProfile = Depends(get_current_user),
    service: FavoriteService = Depends(get_favorite_service),
):
    favorite = service.is_favorite(user.id, property_id)
    return {"success": True, "message": "Favorite state", "data": {"property_id": property_id, "favorite": favorite}}


@router.post("/{property_id}/toggle", response_model=DataResponse)
async def toggle_favorite(
    property_id: str,
    user: UserProfile = Depends(get_current_user),
    service: FavoriteService = Depends(get_favorite_service),
):
    favorite = service.toggle_favorite(user.id, property_id)
    message = "Added to favorites" if favorite else "Removed from favorites"
    return {"success": True, "message": message, "data": {"property_id": property_id, "favorite": favorite}}
