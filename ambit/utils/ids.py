"""
Ambit Request ID Utilities
Generate unique request IDs for log correlation.
"""
import uuid
from datetime import datetime


def generate_request_id(prefix: str = "amb") -> str:
    """
    Generate a unique request ID for tracking.

    Args:
        prefix: Short operation tag placed before the timestamp

    Returns:
        Request ID of the form "<prefix>-<YYYYmmddHHMMSS>-<8 hex chars>"
    """
    timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
    short_uuid = uuid.uuid4().hex[:8]
    return f"{prefix}-{timestamp}-{short_uuid}"

