"""
Stats component - Aggregate entity counts.
"""

from .component import run_get_stats
from .models import StatsOutput
from .ports import CountablePort

__all__ = ["run_get_stats", "StatsOutput", "CountablePort"]
