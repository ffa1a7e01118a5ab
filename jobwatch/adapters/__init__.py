"""Source adapters.

Each adapter reads one configured source and returns canonical Jobs:
- Greenhouse: greenhouse.GreenhouseAdapter
- Lever: lever.LeverAdapter
- Ashby: ashby.AshbyAdapter
- Remotive: remotive.RemotiveAdapter

Use the factory to build one adapter per enabled source:
    from jobwatch.adapters import build_adapters
    adapters = build_adapters(app_config)
    jobs = adapters[0].fetch()

New sources implement BaseAdapter and register in factory.ADAPTER_REGISTRY.
"""

from .ashby import AshbyAdapter
from .base import BaseAdapter
from .exceptions import (
    AdapterConfigurationError,
    AdapterError,
    AdapterHTTPError,
    AdapterResponseError,
    AdapterTimeoutError,
)
from .factory import ADAPTER_REGISTRY, build_adapters, get_adapter
from .greenhouse import GreenhouseAdapter
from .lever import LeverAdapter
from .remotive import RemotiveAdapter

__all__ = [
    # Base and factory
    "BaseAdapter",
    "ADAPTER_REGISTRY",
    "build_adapters",
    "get_adapter",
    # Adapters
    "GreenhouseAdapter",
    "LeverAdapter",
    "AshbyAdapter",
    "RemotiveAdapter",
    # Exceptions
    "AdapterError",
    "AdapterHTTPError",
    "AdapterTimeoutError",
    "AdapterResponseError",
    "AdapterConfigurationError",
]
