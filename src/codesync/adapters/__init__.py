"""Platform adapters."""

from codesync.adapters.base import AdapterRegistry, FetchResult, PlatformAdapter, fetch_with_adapter
from codesync.adapters.gateway import GatewayAdapter, build_gateway_registry

__all__ = [
    "AdapterRegistry",
    "FetchResult",
    "GatewayAdapter",
    "PlatformAdapter",
    "build_gateway_registry",
    "fetch_with_adapter",
]
