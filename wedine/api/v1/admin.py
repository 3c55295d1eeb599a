"""
Shop staff routes
Credentials, login, order dashboard and catalog maintenance
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query

from ...core.error_handler import create_success_response
from ...core.security import require_admin, verify_setup_token
from ...schemas.admin import AdminLoginRequest, SetupCredentialsRequest, UpdateOrderStatusRequest
from ...schemas.catalog import CategoryCreateRequest, FoodItemCreateRequest, ShopCreateRequest
from ...services.admin_service import admin_service
from ...services.catalog_service import catalog_service

router = APIRouter()


@router.post("/setup-credentials")
def setup_credentials(req: SetupCredentialsRequest, _: bool = Depends(verify_setup_token)):
    result = admin_service.setup_credentials(req.shop_name, req.username, req.password)
    return create_success_response(result, "Admin credentials created successfully")


@router.post("/login")
def admin_login(req: AdminLoginRequest):
    return create_success_response(admin_service.login(req.username, req.password), "Login successful")


@router.get("/orders")
def list_shop_orders(
    order_type: str = Query("active", alias="type", description="active or history"),
    admin: Dict[str, Any] = Depends(require_admin),
):
    """Orders containing items from the admin's shop"""
    return create_success_response(admin_service.list_orders(order_type, admin["shop_name"]))


@router.patch("/update-order-status")
def update_order_status(req: UpdateOrderStatusRequest, admin: Dict[str, Any] = Depends(require_admin)):
    result = admin_service.update_order_status(req.order_id, req.status, admin)
    return create_success_response(result, "Order status updated successfully")


@router.post("/shops")
def create_shop(req: ShopCreateRequest, admin: Dict[str, Any] = Depends(require_admin)):
    return create_success_response(catalog_service.create_shop(req.model_dump()), "Shop created")


@router.post("/categories")
def create_category(req: CategoryCreateRequest, admin: Dict[str, Any] = Depends(require_admin)):
    return create_success_response(catalog_service.create_category(req.model_dump()), "Category created")


@router.post("/food-items")
def create_food_item(req: FoodItemCreateRequest, admin: Dict[str, Any] = Depends(require_admin)):
    return create_success_response(catalog_service.create_food_item(req.model_dump()), "Food item created")
