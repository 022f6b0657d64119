"""
Database services
"""

from .trends import TrendStore

__all__ = ["TrendStore"]
