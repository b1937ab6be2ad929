"""
alias_platform package initializer.
"""

from . import api
from . import persister
from . import storage

__all__ = ["api", "persister", "storage"]
