"""
API Module
FastAPI application, endpoints and models
"""

from .dependencies import get_data_app, get_store
from .main import create_fastapi_app
from .models import APIResponse, CollectResponse, TrendingRepoResponse

__all__ = [
    "create_fastapi_app",
    "APIResponse",
    "CollectResponse",
    "TrendingRepoResponse",
    "get_data_app",
    "get_store",
]
