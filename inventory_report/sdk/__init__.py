"""
SDK for the service-management REST API.

Provides programmatic access to usage reports and the inventory list.
"""

from .api_client import FetchError, InventoryApiClient

__all__ = ["FetchError", "InventoryApiClient"]
