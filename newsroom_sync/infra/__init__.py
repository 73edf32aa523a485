"""Infra layer utilities (scratch space, UA pool)."""

from .scratch import ScratchSpace
from .ua_pool import UserAgentPool

__all__ = ["ScratchSpace", "UserAgentPool"]
