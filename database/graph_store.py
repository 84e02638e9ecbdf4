"""Async Neo4j access for citation graph queries."""

from typing import Any, Optional

from neo4j import AsyncDriver, AsyncGraphDatabase, Record, RoutingControl

from core.config import get_settings
from core.exceptions import GraphStoreError
from core.logger import LoggerMixin


class GraphStore(LoggerMixin):
    """
    Read-only query executor over the citation graph.

    The driver is created on first use and pooled for the lifetime of the
    store. Use as an async context manager, or call ``close()``.
    """

    def __init__(
        self,
        uri: Optional[str] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        database: Optional[str] = None,
    ) -> None:
        self._settings = get_settings()
        self._uri = uri or self._settings.NEO4J_URI
        self._user = user or self._settings.NEO4J_USER
        self._password = password if password is not None else self._settings.NEO4J_PASSWORD
        self._database = database or self._settings.NEO4J_DATABASE
        self._driver: Optional[AsyncDriver] = None

    @property
    def driver(self) -> AsyncDriver:
        """
        Lazily initialize and return the Neo4j driver.

        Raises:
            GraphStoreError: If the driver cannot be created.
        """
        if self._driver is None:
            try:
                self._driver = AsyncGraphDatabase.driver(
                    self._uri,
                    auth=(self._user, self._password),
                    max_connection_pool_size=self._settings.NEO4J_MAX_POOL_SIZE,
                    connection_timeout=self._settings.NEO4J_CONNECTION_TIMEOUT,
                )
                self.logger.info(
                    "Neo4j driver initialized",
                    uri=self._uri,
                    database=self._database,
                )
            except Exception as e:
                self.logger.error(
                    "Failed to initialize Neo4j driver",
                    uri=self._uri,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise GraphStoreError(
                    message="Failed to connect to Neo4j",
                    details={"uri": self._uri, "error": str(e)},
                ) from e
        return self._driver

    async def run_query(
        self,
        query: str,
        parameters: Optional[dict[str, Any]] = None,
    ) -> list[Record]:
        """
        Run a read query and return its records.

        Driver errors are logged and re-raised unchanged.

        Args:
            query: Cypher text; user values must be passed as parameters.
            parameters: Named query parameters.

        Returns:
            list[Record]: Result records.
        """
        driver = self.driver
        parameters = parameters or {}

        try:
            result = await driver.execute_query(
                query,
                parameters_=parameters,
                database_=self._database,
                routing_=RoutingControl.READ,
            )
        except Exception as e:
            self.logger.error(
                "Graph query failed",
                database=self._database,
                parameters=sorted(parameters),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        self.logger.debug(
            "Graph query completed",
            database=self._database,
            rows=len(result.records),
        )
        return result.records

    async def close(self) -> None:
        """Close the driver and release pooled connections."""
        if self._driver is not None:
            await self._driver.close()
            self._driver = None
            self.logger.info("Neo4j driver closed")

    async def __aenter__(self) -> "GraphStore":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
