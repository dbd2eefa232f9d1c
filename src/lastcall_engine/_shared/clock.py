# Area: Shared
"""
lastcall_engine._shared.clock — Timestamp and identifier helpers
================================================================

All engine timestamps are ISO 8601 strings in UTC so that snapshots
serialize without conversion.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional


def current_timestamp() -> str:
    """Generate ISO 8601 timestamp with timezone."""
    return datetime.now(timezone.utc).isoformat()


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp produced by current_timestamp()."""
    if not value:
        return None
    return datetime.fromisoformat(value)


def generate_id(prefix: str) -> str:
    """Generate unique identifier.

    Format: prefix_XXXXXXXXXXXX
    """
    return f"{prefix}_{uuid.uuid4().hex[:12]}"
