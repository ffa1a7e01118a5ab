"""Factory functions for instantiating source adapters."""

from typing import Dict, List, Type

from jobwatch.config.models import AdvancedConfig, AppConfig, SourceConfig
from jobwatch.logging import get_logger

from .ashby import AshbyAdapter
from .base import BaseAdapter
from .exceptions import AdapterConfigurationError
from .greenhouse import GreenhouseAdapter
from .lever import LeverAdapter
from .remotive import RemotiveAdapter

logger = get_logger(__name__, component="adapter")

ADAPTER_REGISTRY: Dict[str, Type[BaseAdapter]] = {
    GreenhouseAdapter.ADAPTER_NAME: GreenhouseAdapter,
    LeverAdapter.ADAPTER_NAME: LeverAdapter,
    AshbyAdapter.ADAPTER_NAME: AshbyAdapter,
    RemotiveAdapter.ADAPTER_NAME: RemotiveAdapter,
}


def get_adapter(source_config: SourceConfig, advanced_config: AdvancedConfig) -> BaseAdapter:
    """Instantiate the adapter for one configured source.

    Raises:
        AdapterConfigurationError: If the source type is not supported or config is invalid

    Example:
        >>> source = SourceConfig(name="Acme", type="greenhouse", identifier="acme")
        >>> adapter = get_adapter(source, AdvancedConfig())
        >>> jobs = adapter.fetch()
    """
    source_type = str(source_config.type).lower()
    adapter_class = ADAPTER_REGISTRY.get(source_type)

    if not adapter_class:
        supported_types = ", ".join(sorted(ADAPTER_REGISTRY))
        raise AdapterConfigurationError(
            f"Unknown source type: {source_config.type}. Supported types: {supported_types}",
            source=source_config.source_id,
        )

    logger.debug(
        "Creating adapter instance",
        extra={
            "source": source_config.source_id,
            "adapter_class": adapter_class.__name__,
        },
    )

    return adapter_class(
        source_config,
        timeout=advanced_config.http_request_timeout,
        user_agent=advanced_config.user_agent,
        max_jobs=advanced_config.max_jobs_per_source,
        description_max_length=advanced_config.description_max_length,
    )


def build_adapters(app_config: AppConfig) -> List[BaseAdapter]:
    """One adapter per enabled source, in configuration order."""
    return [
        get_adapter(source, app_config.advanced) for source in app_config.get_enabled_sources()
    ]
