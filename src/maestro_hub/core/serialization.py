"""
JSON rendering of the unified model.

Money stays exact: Decimal is always emitted as a string.
"""

import dataclasses
import json
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any


class DecimalEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimal, datetime and Enum values."""
    def default(self, obj):
        if isinstance(obj, Decimal):
            return str(obj)  # Convert to string to preserve precision
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


def to_jsonable(obj: Any) -> Any:
    """
    Convert dataclasses (recursively) into JSON-ready primitives.

    Enum dict keys (e.g. balance by provider) become their values.
    """
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_jsonable(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    if isinstance(obj, dict):
        return {
            (k.value if isinstance(k, Enum) else k): to_jsonable(v)
            for k, v in obj.items()
        }
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(item) for item in obj]
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    return obj


def dumps(obj: Any, **kwargs) -> str:
    return json.dumps(to_jsonable(obj), cls=DecimalEncoder, **kwargs)
