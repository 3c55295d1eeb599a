"""
Catalog routes: shops, categories, food items and stock
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from ...core.error_handler import create_success_response
from ...core.security import get_current_user
from ...schemas.catalog import StockReductionRequest
from ...services.catalog_service import catalog_service

router = APIRouter()


@router.get("/shops")
def list_shops():
    return create_success_response(catalog_service.list_shops())


@router.get("/categories")
def list_categories():
    return create_success_response(catalog_service.list_categories())


@router.get("/food-items")
def list_food_items(
    category_id: Optional[int] = Query(None, description="category filter"),
    shop_id: Optional[int] = Query(None, description="shop filter"),
    search: Optional[str] = Query(None, description="name contains"),
):
    return create_success_response(catalog_service.list_food_items(category_id, shop_id, search))


@router.get("/food-items/{food_id}")
def get_food_item(food_id: int):
    return create_success_response(catalog_service.get_food_item(food_id))


@router.put("/products/reduce-stock")
def reduce_stock(req: StockReductionRequest, user: Dict[str, Any] = Depends(get_current_user)):
    """
    Reduce stock after checkout

    Answers 207 when some items could not be updated.
    """
    result = catalog_service.reduce_stock([item.model_dump() for item in req.items])
    if result["errors"]:
        body = {
            "success": False,
            "message": "Some stock updates failed",
            "errors": result["errors"],
            "data": {"updates": result["updates"]},
        }
        return JSONResponse(status_code=207, content=jsonable_encoder(body))
    return create_success_response(result, "Stock updated successfully")
