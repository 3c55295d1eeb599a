"""
Unified error handling
Standard error response format and the FastAPI exception handlers

Main features:
- Uniform error body for every failure
- Error code to HTTP status mapping
- Unexpected errors recorded to the logs table
"""

import logging
import traceback
from typing import Dict, Any, Optional
from fastapi import Request, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from .exceptions import BaseApplicationError
from .database import db_manager

logger = logging.getLogger(__name__)


class ErrorResponse:
    """Standard error response"""

    def __init__(self, error_code: str, message: str,
                 details: Optional[Dict[str, Any]] = None,
                 http_status: int = 400):
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        self.http_status = http_status

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": False,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }

    def to_json_response(self) -> JSONResponse:
        return JSONResponse(
            status_code=self.http_status,
            content=jsonable_encoder(self.to_dict())
        )


class ErrorHandler:
    """Global error handler"""

    ERROR_CODE_STATUS_MAP = {
        "VALIDATION_ERROR": 400,
        "AUTHENTICATION_REQUIRED": 401,
        "PERMISSION_DENIED": 403,
        "INTERNAL_ERROR": 500,
        "DATABASE_ERROR": 500,
        "CONCURRENCY_CONFLICT": 409,
        "ENDPOINT_GONE": 410,

        # Orders
        "ORDER_NOT_FOUND": 404,
        "DUPLICATE_ORDER": 409,
        "INVALID_STATUS": 400,
        "STATUS_VERIFICATION_FAILED": 500,

        # Payments
        "INVALID_SIGNATURE": 400,
        "PAYMENT_ALREADY_PROCESSED": 409,
        "PAYMENT_GATEWAY_ERROR": 502,

        # Notifications
        "NOTIFICATION_FAILED": 502,

        # Catalog, cart and reviews
        "FOOD_NOT_FOUND": 404,
        "SHOP_NOT_FOUND": 404,
        "CART_ITEM_NOT_FOUND": 404,
        "REVIEW_NOT_FOUND": 404,

        # Admin
        "INVALID_CREDENTIALS": 401,
        "ACCOUNT_INACTIVE": 401,
        "CREDENTIALS_EXIST": 409,
    }

    @classmethod
    def handle_application_error(cls, error: BaseApplicationError) -> ErrorResponse:
        http_status = cls.ERROR_CODE_STATUS_MAP.get(error.error_code, 400)
        if http_status >= 500:
            logger.error("%s: %s %s", error.error_code, error.message, error.details)
        return ErrorResponse(
            error_code=error.error_code,
            message=error.message,
            details=error.details,
            http_status=http_status
        )

    @classmethod
    def handle_http_exception(cls, error: HTTPException) -> ErrorResponse:
        return ErrorResponse(
            error_code="HTTP_ERROR",
            message=str(error.detail),
            details={"status_code": error.status_code},
            http_status=error.status_code
        )

    @classmethod
    def handle_validation_error(cls, error: Exception) -> ErrorResponse:
        """Request body / query validation failures"""
        errors = error.errors() if hasattr(error, "errors") else str(error)
        return ErrorResponse(
            error_code="VALIDATION_ERROR",
            message="Request validation failed",
            details={"validation_errors": errors},
            http_status=422
        )

    @classmethod
    def handle_unknown_error(cls, error: Exception) -> ErrorResponse:
        error_details = {
            "type": type(error).__name__,
            "message": str(error),
            "traceback": traceback.format_exc()
        }
        logger.exception("Unhandled error: %s", error)
        cls._log_system_error(error_details)

        return ErrorResponse(
            error_code="INTERNAL_ERROR",
            message=str(error) or "Internal server error",
            details={"error_type": type(error).__name__},
            http_status=500
        )

    @classmethod
    def _log_system_error(cls, error_details: Dict[str, Any]):
        """Record the failure in the logs table"""
        try:
            db_manager.log_action(None, None, "system_error", error_details)
        except Exception:
            logger.error("Failed to log error to database: %s", error_details)


async def application_error_handler(request: Request, exc: BaseApplicationError) -> JSONResponse:
    return ErrorHandler.handle_application_error(exc).to_json_response()


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return ErrorHandler.handle_http_exception(exc).to_json_response()


async def validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    return ErrorHandler.handle_validation_error(exc).to_json_response()


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    return ErrorHandler.handle_unknown_error(exc).to_json_response()


def create_success_response(data: Any = None, message: str = "OK") -> Dict[str, Any]:
    """Standard success body"""
    response = {
        "success": True,
        "message": message
    }

    if data is not None:
        response["data"] = data

    return response
