"""
Lifecycle package for llcm.

Entry models, filters, the retention simulator, operation handlers and
the multi-region manager.
"""

from .manager import LifecycleManager
from .models import DesiredState, OutputType, sort_entries

__all__ = [
    'LifecycleManager',
    'DesiredState',
    'OutputType',
    'sort_entries',
]
