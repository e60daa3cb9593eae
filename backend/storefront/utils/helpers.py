from datetime import datetime
from typing import Optional
from bson import ObjectId
from bson.errors import InvalidId


def parse_object_id(value) -> Optional[ObjectId]:
    """Parse a string into an ObjectId, or None if it is not a valid id."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def get_current_timestamp() -> datetime:
    """
    Get current UTC timestamp at MongoDB's millisecond precision.

    BSON dates drop microseconds, so a timestamp kept in memory must match
    the one read back from the database.
    """
    now = datetime.utcnow()
    return now.replace(microsecond=now.microsecond // 1000 * 1000)
