"""Hypothesis profiles for irswap tests.

Shared constants, helpers and strategies live in swap_support.
"""

from __future__ import annotations

from hypothesis import HealthCheck, settings

# ---------------------------------------------------------------------------
# Hypothesis global settings
# ---------------------------------------------------------------------------

settings.register_profile(
    "ci",
    max_examples=200,
    suppress_health_check=[HealthCheck.too_slow],
    deadline=None,
)
settings.register_profile(
    "dev",
    max_examples=50,
    suppress_health_check=[HealthCheck.too_slow],
    deadline=None,
)
settings.load_profile("dev")
