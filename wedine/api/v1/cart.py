"""
Cart routes
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ...core.error_handler import create_success_response
from ...core.security import get_current_user
from ...schemas.cart import AddCartItemRequest, CartItemRef
from ...services.cart_service import cart_service

router = APIRouter()


@router.get("")
def list_cart(user: Dict[str, Any] = Depends(get_current_user)):
    return create_success_response(cart_service.list_items(user["user_id"]))


@router.post("")
def add_to_cart(req: AddCartItemRequest, user: Dict[str, Any] = Depends(get_current_user)):
    item = cart_service.add_item(user["user_id"], req.food_id, req.quantity)
    return create_success_response(item, "Item added to cart")


@router.patch("")
def decrement_cart_item(req: CartItemRef, user: Dict[str, Any] = Depends(get_current_user)):
    """Remove one unit; the line goes when its last unit does"""
    return create_success_response(cart_service.decrement_item(user["user_id"], req.cart_item_id))


@router.post("/clear")
def clear_cart(user: Dict[str, Any] = Depends(get_current_user)):
    removed = cart_service.clear(user["user_id"])
    return create_success_response({"removed": removed}, "Cart cleared")


@router.delete("/{cart_item_id}")
def remove_cart_item(cart_item_id: int, user: Dict[str, Any] = Depends(get_current_user)):
    return create_success_response(cart_service.remove_item(user["user_id"], cart_item_id), "Item removed")
