"""
Applications Package for Daily Git Brief

Main application classes wiring the collection components.
"""

from .trend_data_app import TrendDataApp

__all__ = ["TrendDataApp"]
