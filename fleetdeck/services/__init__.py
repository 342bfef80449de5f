"""Services package for FleetDeck."""

from .dashboard_api import DashboardApiClient, DashboardApiError
from .error_mapper import ErrorMapping, map_exception
from .query_cache import QueryCache

__all__ = [
    "DashboardApiClient",
    "DashboardApiError",
    "ErrorMapping",
    "QueryCache",
    "map_exception",
]
