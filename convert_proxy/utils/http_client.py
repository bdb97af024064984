"""
Centralized HTTP client factory for upstream traffic.

This module provides a unified way to create and manage the httpx clients
used to reach the conversion provider and its storage, with consistent
timeout and connection pooling configuration.
"""

import logging
from contextlib import asynccontextmanager
from enum import Enum
from typing import Dict, Optional

import httpx

from ..config import Settings

logger = logging.getLogger(__name__)


class ServiceType(Enum):
    """Service types for HTTP client configuration."""
    PDFCO = "pdfco"
    STORAGE = "storage"


class HTTPClientFactory:
    """
    Centralized factory for creating and managing HTTP clients.

    Provides consistent configuration for timeouts and connection pooling.
    The provider client carries the API key; the storage client does not,
    since presigned URLs and result files live on third-party hosts.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings.from_env()
        self._clients: Dict[ServiceType, httpx.AsyncClient] = {}
        self._limits = None

    def _get_connection_limits(self) -> httpx.Limits:
        if self._limits is None:
            self._limits = httpx.Limits(
                max_keepalive_connections=10,
                max_connections=50,
                keepalive_expiry=30.0
            )
        return self._limits

    def _get_timeout(self) -> httpx.Timeout:
        """Every upstream call is bounded; a timeout is an ordinary failure."""
        return httpx.Timeout(
            connect=self.settings.connect_timeout,
            read=self.settings.read_timeout,
            write=self.settings.read_timeout,
            pool=self.settings.connect_timeout
        )

    def create_client(
        self,
        service_type: ServiceType = ServiceType.PDFCO,
        **overrides
    ) -> httpx.AsyncClient:
        """
        Create an HTTP client for a service type.

        Args:
            service_type: Type of service the client will be used for
            **overrides: Override default client configuration (e.g. ``transport``)

        Returns:
            Configured AsyncClient instance
        """
        config = {
            'timeout': self._get_timeout(),
            'limits': self._get_connection_limits(),
            'follow_redirects': service_type == ServiceType.STORAGE,
        }

        if service_type == ServiceType.PDFCO:
            config['base_url'] = self.settings.base_url
            config['headers'] = {
                "Content-Type": "application/json",
                "x-api-key": self.settings.api_key,
            }

        config.update(overrides)

        client = httpx.AsyncClient(**config)
        self._clients[service_type] = client
        return client

    def get_client(self, service_type: ServiceType) -> Optional[httpx.AsyncClient]:
        """Get an existing client for a service type."""
        return self._clients.get(service_type)

    async def close_all_clients(self):
        """Close all managed clients."""
        for client in self._clients.values():
            try:
                await client.aclose()
            except Exception as e:
                logger.warning(f"Error closing HTTP client: {e}")

        self._clients.clear()


@asynccontextmanager
async def lifespan_http_clients(factory: HTTPClientFactory):
    """
    Context manager for HTTP client lifecycle management.

    Use this in FastAPI lifespan events to ensure proper client cleanup.
    """
    try:
        yield factory
    finally:
        await factory.close_all_clients()
