"""ObjectId helpers."""
from bson import ObjectId
from bson.errors import InvalidId


def parse_object_id(value: str, entity: str) -> ObjectId:
    """
    Convert a string ID to ObjectId.

    Args:
        value: ID string from the request
        entity: Entity name used in the error message (e.g. "task")

    Returns:
        ObjectId

    Raises:
        ValueError: If the ID is not a valid ObjectId

    Example:
        >>> parse_object_id("nope", "task")
        Traceback (most recent call last):
        ...
        ValueError: Invalid task ID format
    """
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise ValueError(f"Invalid {entity} ID format")
