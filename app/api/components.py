from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import get_user_id
from app.schemas.catalog import ComponentCreate, ComponentResponse, ComponentUpdate
from app.schemas.inventory import StockLevelResponse
from app.schemas.response import SuccessResponse
from app.services import catalog_service

router = APIRouter()


@router.get("", response_model=SuccessResponse)
async def list_components(
    search: Optional[str] = Query(None, description="Matches component number or description."),
    include_inactive: bool = Query(False, alias="includeInactive"),
):
    components = await catalog_service.list_components(search, include_inactive)
    return SuccessResponse(data=[ComponentResponse.model_validate(c).dump() for c in components])


@router.get("/{component_id}", response_model=SuccessResponse)
async def get_component(component_id: int):
    """Component with its stock at every location."""
    component = await catalog_service.get_component(component_id)
    data = ComponentResponse.model_validate(component).dump()
    data["inventoryItems"] = [StockLevelResponse.model_validate(i).dump() for i in component.inventory_items]
    return SuccessResponse(data=data)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_component(payload: ComponentCreate, user_id: Optional[int] = Depends(get_user_id)):
    component = await catalog_service.create_component(payload.model_dump(), user_id)
    return SuccessResponse(data=ComponentResponse.model_validate(component).dump())


@router.put("/{component_id}", response_model=SuccessResponse)
async def update_component(component_id: int, payload: ComponentUpdate, user_id: Optional[int] = Depends(get_user_id)):
    component = await catalog_service.update_component(component_id, payload.model_dump(exclude_unset=True), user_id)
    return SuccessResponse(data=ComponentResponse.model_validate(component).dump())


@router.delete("/{component_id}", response_model=SuccessResponse)
async def deactivate_component(component_id: int, user_id: Optional[int] = Depends(get_user_id)):
    """Deactivates the component; its transaction history stays intact."""
    component = await catalog_service.deactivate_component(component_id, user_id)
    return SuccessResponse(data=ComponentResponse.model_validate(component).dump())
