"""
PURPOSE: Rate limiting configuration for the Signal Ledger API using slowapi.

Provides a shared Limiter instance keyed by client IP address and
pre-defined rate limit strings for the two endpoint categories:
    - WEBHOOK_LIMIT: moderate (30/minute) — public inbound webhook
    - READ_LIMIT:    relaxed  (60/minute) — event listing endpoints
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

# Shared limiter instance — keyed by client IP
limiter = Limiter(key_func=get_remote_address)

# ── Rate limit tiers ──────────────────────────────────────────
WEBHOOK_LIMIT = "30/minute"
READ_LIMIT = "60/minute"
