"""
Base data models
Shared model base classes and JSON column helpers
"""

import json
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


def load_json(value: Any, default: Any = None) -> Any:
    """DuckDB hands JSON columns back as strings"""
    if value is None:
        return default
    if isinstance(value, (str, bytes)):
        try:
            return json.loads(value)
        except ValueError:
            return default
    return value


class TimestampMixin(BaseModel):
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BaseEntity(BaseModel):
    """Base entity model"""

    model_config = {"from_attributes": True, "use_enum_values": True}
