"""
Order pricing and multi-vendor payment splits. All amounts are in paise.
"""

from typing import Any, Dict, List

from ..config.settings import settings


def calculate_tax(subtotal_paise: int, tax_percent: int) -> int:
    """Percentage of the subtotal, rounded half up to whole paise"""
    return (subtotal_paise * tax_percent + 50) // 100


def calculate_total_amount(subtotal_paise: int) -> Dict[str, int]:
    tax = calculate_tax(subtotal_paise, settings.tax_percent)
    if subtotal_paise <= 0 or subtotal_paise >= settings.free_delivery_threshold_paise:
        delivery_fee = 0
    else:
        delivery_fee = settings.delivery_fee_paise
    return {
        "subtotal": subtotal_paise,
        "tax": tax,
        "delivery_fee": delivery_fee,
        "total": subtotal_paise + tax + delivery_fee,
    }


def calculate_payment_splits(order_items: List[Dict[str, Any]],
                             shops: Dict[int, Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    One split per shop, in the order shops first appear in the cart

    Args:
        order_items: priced items with shop_id, shop_name, price, quantity
        shops: shop rows keyed by shop_id (for the owner's mobile number)
    """
    splits: Dict[int, Dict[str, Any]] = {}
    for item in order_items:
        shop_id = item["shop_id"]
        split = splits.get(shop_id)
        if split is None:
            shop = shops.get(shop_id) or {}
            split = {
                "shop_id": shop_id,
                "shop_name": item.get("shop_name") or shop.get("shop_name"),
                "owner_mobile": shop.get("owner_mobile"),
                "split_amount": 0,
                "transfer_id": "",
                "transfer_status": "pending",
                "transferred_at": None,
            }
            splits[shop_id] = split
        split["split_amount"] += item["price"] * item["quantity"]
    return list(splits.values())
