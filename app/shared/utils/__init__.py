"""Shared utilities: datetime and identifier generators."""

from app.shared.utils.datetime import elapsed_ms, ensure_utc, utc_now
from app.shared.utils.generators import generate_cuid

__all__ = [
    "elapsed_ms",
    "ensure_utc",
    "generate_cuid",
    "utc_now",
]
