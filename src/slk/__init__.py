"""
slk: a terminal chat client for Slack workspaces.

This package follows Parnas's information hiding principles,
where each module hides a specific design decision.
"""

__version__ = "0.1.0"

from .session import Session, SessionExit

__all__ = [
    "Session",
    "SessionExit",
]
