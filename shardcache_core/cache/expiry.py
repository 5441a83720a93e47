"""ShardCache Expiry - Expiry Normalization.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import math
import time
from datetime import date, datetime, timedelta
from typing import Any, Optional, Union

from shardcache_core.errors import ConfigurationError

# Backends read integers above this as absolute epoch seconds.
EXPIRY_SECONDS_LIMIT = 2592000

ExpiryValue = Union[None, int, float, datetime, date, timedelta]


def parse_expiry(expiry: Any) -> Optional[int]:
    """Normalize a caller-supplied expiry.

    Args:
        expiry: None, relative seconds, datetime, date or timedelta

    Returns:
        None, relative seconds (<= 30 days) or absolute epoch seconds

    Raises:
        ConfigurationError: If seconds exceed 30 days or the type is unknown
    """
    if expiry is None:
        return None

    if isinstance(expiry, timedelta):
        expiry = datetime.now() + expiry

    if isinstance(expiry, datetime):
        return int(expiry.timestamp())

    if isinstance(expiry, date):
        return int(time.mktime(expiry.timetuple()))

    if isinstance(expiry, (int, float)) and not isinstance(expiry, bool):
        if expiry > EXPIRY_SECONDS_LIMIT:
            raise ConfigurationError(
                "Expiry seconds cannot be more than 30 days! "
                "Pass a datetime, date or timedelta instead."
            )
        # Fractional seconds round up; only an explicit 0 never expires.
        return math.ceil(expiry)

    raise ConfigurationError(f"Unsupported expiry value: {expiry!r}")


def resolve_deadline(expiry: Optional[int], now: Optional[float] = None) -> Optional[float]:
    """Turn a normalized expiry into an absolute deadline.

    Args:
        expiry: Normalized expiry (relative seconds or absolute epoch)
        now: Current time, defaults to time.time()

    Returns:
        Epoch deadline, or None when the entry never expires
    """
    if not expiry:
        return None
    if expiry > EXPIRY_SECONDS_LIMIT:
        return float(expiry)
    return (time.time() if now is None else now) + expiry


__all__ = ["EXPIRY_SECONDS_LIMIT", "ExpiryValue", "parse_expiry", "resolve_deadline"]
