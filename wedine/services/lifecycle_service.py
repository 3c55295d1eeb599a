"""
Order lifecycle service
Moves orders out of the active table and keeps both tables tidy

Main features:
- Archive orders past the retention window (one transaction per order)
- Archive paid and delivered orders right away
- Remove duplicate orders, orphaned history and abandoned online orders
- Cleanup statistics for the dashboard
"""

import logging
import time
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from ..config.settings import settings
from ..core.database import db_manager
from ..core.exceptions import BaseApplicationError, ValidationError
from ..models.order import HISTORY_INSERT_SQL, Order, OrderHistory, OrderStatus
from ..utils.order_lifecycle import (
    create_history_record,
    expired_cutoff,
    utc_now,
    validate_order_for_history,
)

logger = logging.getLogger(__name__)


class LifecycleService:
    """Archiving and cleanup jobs"""

    def __init__(self):
        self.db = db_manager

    def cleanup_expired_orders(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Archive every order older than the retention window

        A failure on one order is recorded and the rest are still processed.

        Returns:
            dict: success, message, processed, errors, execution_time_ms
        """
        started = time.perf_counter()
        now = now or utc_now()
        retention = settings.order_retention_hours
        cutoff = expired_cutoff(retention, now)

        rows = self.db.fetch_dicts(
            "SELECT * FROM orders WHERE created_at < ? AND is_archived = FALSE ORDER BY created_at",
            [cutoff],
        )

        processed = 0
        errors: List[str] = []
        for row in rows:
            try:
                self._archive_order(row, now, retention)
                processed += 1
            except BaseApplicationError as e:
                message = f"Failed to process order {row['order_id']}: {e.message}"
                errors.append(message)
                logger.error(message)

        execution_time_ms = int((time.perf_counter() - started) * 1000)
        if rows:
            self.db.log_action(None, "system", "orders_archived", {
                "processed": processed,
                "errors": len(errors),
                "cutoff": cutoff,
            })
        logger.info("Archived %d of %d expired orders in %dms", processed, len(rows), execution_time_ms)

        return {
            "success": True,
            "message": f"Processed {processed} expired orders" if rows else "No expired orders found",
            "processed": processed,
            "errors": errors,
            "execution_time_ms": execution_time_ms,
        }

    def _archive_order(self, row: Dict[str, Any], now: datetime, retention_hours: int,
                       notes: Optional[str] = None):
        """
        Insert or sync the history record, then drop the active order

        Raises:
            ValidationError: the row cannot be turned into a history record
        """
        try:
            order = Order.from_row(row)
        except PydanticValidationError as e:
            raise ValidationError(f"Malformed order row: {e.error_count()} invalid fields",
                                  {"order_id": row.get("order_id")})

        order_data = order.model_dump()
        is_valid, errors = validate_order_for_history(order_data)
        if not is_valid:
            raise ValidationError(", ".join(errors), {"order_id": order.order_id})

        record = create_history_record(order_data, now, retention_hours)
        if notes:
            record["lifecycle_notes"] = notes
        try:
            history = OrderHistory.model_validate(record)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid history record: {e.error_count()} invalid fields",
                                  {"order_id": order.order_id})

        with self.db.transaction() as conn:
            existing = conn.execute(
                "SELECT history_id FROM order_history WHERE original_order_id = ? LIMIT 1",
                [order.order_id],
            ).fetchone()

            if existing:
                conn.execute(
                    """
                    UPDATE order_history
                    SET status = ?, order_status = ?, payment_status = ?,
                        payment_details_json = ?, archived_at = ?, lifecycle_notes = ?,
                        updated_at = ?
                    WHERE history_id = ?
                    """,
                    [
                        order.status, order.order_status, order.payment_status,
                        order.payment_details.model_dump_json(), now, record["lifecycle_notes"],
                        order.updated_at, existing[0],
                    ],
                )
            else:
                conn.execute(HISTORY_INSERT_SQL, history.insert_params())

            conn.execute("DELETE FROM orders WHERE order_id = ?", [order.order_id])

    def get_cleanup_stats(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or utc_now()
        cutoff = expired_cutoff(settings.order_retention_hours, now)

        expired = self.db.execute_one(
            "SELECT COUNT(*) FROM orders WHERE created_at < ? AND is_archived = FALSE", [cutoff]
        )[0]
        active = self.db.execute_one("SELECT COUNT(*) FROM orders WHERE is_archived = FALSE")[0]
        history = self.db.execute_one("SELECT COUNT(*) FROM order_history")[0]
        archived = self.db.execute_one(
            "SELECT COUNT(*) FROM order_history WHERE archived_at IS NOT NULL"
        )[0]

        return {
            "expired_orders": expired,
            "active_orders": active,
            "history_records": history,
            "archived_orders": archived,
            "last_check": now.isoformat(),
        }

    def cleanup_duplicates(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Remove duplicate orders, orphaned history and abandoned online orders

        Duplicates are orders sharing an identifier, or placed by the same
        user within the same minute; the earliest of each group is kept.
        Orphaned history means records that were never archived and whose
        order no longer exists.
        """
        now = now or utc_now()

        with self.db.transaction() as conn:
            rows = conn.execute(
                "SELECT order_id, user_id, order_identifier, created_at FROM orders ORDER BY created_at, order_id"
            ).fetchall()
            to_delete = set()
            seen_identifiers = set()
            seen_minutes = set()
            for order_id, user_id, identifier, created_at in rows:
                if identifier:
                    if identifier in seen_identifiers:
                        to_delete.add(order_id)
                    seen_identifiers.add(identifier)

                minute_key = (user_id, created_at.replace(second=0, microsecond=0))
                if minute_key in seen_minutes:
                    to_delete.add(order_id)
                seen_minutes.add(minute_key)

            for order_id in sorted(to_delete):
                conn.execute("DELETE FROM orders WHERE order_id = ?", [order_id])

            orphaned = conn.execute(
                """
                DELETE FROM order_history
                WHERE archived_at IS NULL
                  AND (original_order_id IS NULL
                       OR original_order_id NOT IN (SELECT order_id FROM orders))
                RETURNING history_id
                """
            ).fetchall()

            pending_cutoff = now - timedelta(minutes=settings.pending_order_timeout_minutes)
            old_pending = conn.execute(
                """
                DELETE FROM orders
                WHERE payment_method = 'online' AND payment_status = FALSE
                  AND is_archived = FALSE AND created_at < ?
                RETURNING order_id
                """,
                [pending_cutoff],
            ).fetchall()

        result = {
            "duplicate_orders_deleted": len(to_delete),
            "orphaned_history_deleted": len(orphaned),
            "old_pending_orders_deleted": len(old_pending),
        }
        result["total_cleaned"] = sum(result.values())

        self.db.log_action(None, "system", "orders_deduplicated", result)
        logger.info("Duplicate cleanup: %s", result)
        return result

    def archive_completed_orders(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Move paid and delivered orders to history whatever their age"""
        now = now or utc_now()
        rows = self.db.fetch_dicts(
            "SELECT * FROM orders WHERE payment_status = TRUE AND status = ? AND is_archived = FALSE",
            [OrderStatus.DELIVERED.value],
        )

        moved = 0
        for row in rows:
            try:
                self._archive_order(row, now, settings.order_retention_hours,
                                    notes=f"Moved to history after delivery on {now.isoformat()}")
                moved += 1
            except BaseApplicationError as e:
                logger.error("Failed to move order %s to history: %s", row["order_id"], e.message)

        if moved:
            self.db.log_action(None, "system", "orders_moved_to_history", {"moved": moved})
        return {"moved": moved}


# Global service instance
lifecycle_service = LifecycleService()
