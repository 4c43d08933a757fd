"""Core business logic for the Stage Planner.

This package contains the stage allocation, scheduling and status
classification logic. It has ZERO dependency on the HTTP layer or on
any storage backend.
"""

__version__ = "0.3.0"
