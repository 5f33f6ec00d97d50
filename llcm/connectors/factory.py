"""
Logs client factory.

This module creates CloudWatch Logs clients by name so that the CLI can be
pointed at an alternative implementation (an in-memory client in tests)
without changing the manager.
"""

from typing import Callable, Dict

from llcm.config.regions import ALLOWED_REGIONS
from llcm.config.settings import LlcmSettings
from llcm.connectors.base import LogsAPI
from llcm.connectors.cloudwatch import CloudWatchLogsClient
from llcm.errors import BadArgumentError

ClientBuilder = Callable[[LlcmSettings], LogsAPI]


def _build_cloudwatch(settings: LlcmSettings) -> LogsAPI:
    # One thread per worker plus one per possible producer
    return CloudWatchLogsClient(
        profile=settings.profile,
        max_workers=settings.num_workers + len(ALLOWED_REGIONS),
    )


class LogsClientFactory:
    """Factory for creating logs clients."""

    _builders: Dict[str, ClientBuilder] = {
        "cloudwatch": _build_cloudwatch,
    }

    @classmethod
    def create_client(cls, client_type: str, settings: LlcmSettings) -> LogsAPI:
        """
        Create a logs client instance.

        Args:
            client_type: Registered client name (e.g., 'cloudwatch')
            settings: Settings the client is built from

        Returns:
            LogsAPI instance

        Raises:
            BadArgumentError: If client_type is not registered
        """
        if client_type not in cls._builders:
            available = ", ".join(cls._builders.keys())
            raise BadArgumentError(f"Unknown client type: {client_type}. Available: {available}")
        return cls._builders[client_type](settings)

    @classmethod
    def get_available_clients(cls) -> list[str]:
        return list(cls._builders.keys())

    @classmethod
    def register_client(cls, name: str, builder: ClientBuilder) -> None:
        """
        Register a new client type.

        Args:
            name: Name of the client type
            builder: Callable building a LogsAPI from settings
        """
        cls._builders[name] = builder

    @classmethod
    def unregister_client(cls, name: str) -> None:
        cls._builders.pop(name, None)
