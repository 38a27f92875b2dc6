"""
Version helpers for the Octra wallet package.
"""

from __future__ import annotations

# Bump this when publishing
__version__ = "0.1.0"


def user_agent() -> str:
    return f"octra-wallet-py/{__version__}"


__all__ = ["__version__", "user_agent"]
