"""Python client for the IncorpDesk HTTP API."""

from app.client.api_client import ApiClient, ApiError, ApiResult  # noqa: F401
from app.client.offline_cache import OfflineCache  # noqa: F401
