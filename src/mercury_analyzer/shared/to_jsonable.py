from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from enum import Enum
from pathlib import PurePath


def to_jsonable(obj):
    """Convert domain objects into JSON-serializable values.

    Handles:
    - Basic types (str, int, float, bool, None)
    - Enums (by value), datetimes (ISO 8601), paths (as strings)
    - Collections (list, tuple, set, dict)
    - Pydantic models and dataclasses
    - Objects with __dict__

    Anything else falls back to str().
    """
    if isinstance(obj, Enum):
        return to_jsonable(obj.value)
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, PurePath):
        return str(obj)
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(item) for item in obj]
    if isinstance(obj, (set, frozenset)):
        return [to_jsonable(item) for item in sorted(obj, key=str)]
    if isinstance(obj, dict):
        return {str(to_jsonable(k)): to_jsonable(v) for k, v in obj.items()}
    if hasattr(obj, "model_dump"):  # Pydantic v2
        return to_jsonable(obj.model_dump())
    if is_dataclass(obj) and not isinstance(obj, type):
        return to_jsonable(asdict(obj))
    if hasattr(obj, "__dict__"):
        return to_jsonable(obj.__dict__)
    return str(obj)
