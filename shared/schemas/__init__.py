"""Pydantic v2 schemas shared between the API and the CLI."""

from .projects import *  # noqa: F401,F403
from .stageplan import *  # noqa: F401,F403
