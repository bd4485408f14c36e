"""Async Cassandra connection using cassandra-asyncio-driver.

Provides:
- Cluster connection and session lifecycle
- Session with aexecute() for non-blocking queries
- Keyspace and table initialization

The cassandra-asyncio-driver extends the standard cassandra-driver
with a `session.aexecute()` method for async/await support.
"""

import structlog
from cassandra import DriverException
from cassandra.auth import PlainTextAuthProvider
from cassandra.cluster import NoHostAvailable
from cassandra.policies import DCAwareRoundRobinPolicy, TokenAwarePolicy
from cassandra_asyncio.cluster import Cluster

from learnhub.config.settings import Settings, get_settings
from learnhub.courses.models import COURSES_TABLES_CQL
from learnhub.progress.models import PROGRESS_TABLES_CQL
from learnhub.reviews.models import REVIEWS_TABLES_CQL


logger = structlog.get_logger(__name__)

# Feature name -> CREATE statements, created in this order
SCHEMA: dict[str, list[str]] = {
    "courses": COURSES_TABLES_CQL,
    "progress": PROGRESS_TABLES_CQL,
    "reviews": REVIEWS_TABLES_CQL,
}


class AsyncCassandraConnection:
    """Async Cassandra connection manager.

    Connecting is synchronous; queries on the returned session are awaited
    through aexecute().
    """

    _cluster: Cluster | None = None
    _session = None  # Session type from cassandra_asyncio

    @classmethod
    def connect(cls, settings: Settings | None = None):
        """Establish connection to the Cassandra cluster.

        Raises:
            ConnectionError: If no host could be reached
        """
        if cls._session is not None:
            return cls._session

        settings = settings or get_settings()

        auth_provider = None
        if settings.cassandra_username and settings.cassandra_password:
            auth_provider = PlainTextAuthProvider(
                username=settings.cassandra_username,
                password=settings.cassandra_password,
            )

        cls._cluster = Cluster(
            contact_points=settings.cassandra_hosts,
            port=settings.cassandra_port,
            auth_provider=auth_provider,
            protocol_version=settings.cassandra_protocol_version,
            load_balancing_policy=TokenAwarePolicy(DCAwareRoundRobinPolicy()),
            connect_timeout=settings.cassandra_connect_timeout,
        )

        try:
            cls._session = cls._cluster.connect()
        except (NoHostAvailable, DriverException) as e:
            logger.error("cassandra_connection_failed", error=str(e))
            cls._cluster.shutdown()
            cls._cluster = None
            raise ConnectionError(f"Failed to connect to Cassandra: {e}") from e

        cls._session.default_timeout = settings.cassandra_request_timeout
        logger.info(
            "cassandra_connected",
            hosts=settings.cassandra_hosts,
            port=settings.cassandra_port,
            protocol_version=settings.cassandra_protocol_version,
        )
        return cls._session

    @classmethod
    def disconnect(cls) -> None:
        """Close connection to Cassandra."""
        if cls._session is not None:
            cls._session.shutdown()
            cls._session = None
            logger.info("cassandra_session_closed")

        if cls._cluster is not None:
            cls._cluster.shutdown()
            cls._cluster = None
            logger.info("cassandra_cluster_closed")

    @classmethod
    def is_connected(cls) -> bool:
        """Check if connection is active."""
        return cls._session is not None and not cls._session.is_shutdown


async def init_keyspace(session, keyspace: str, settings: Settings) -> None:
    """Create keyspace if not exists."""
    if settings.is_production:
        replication = """
            'class': 'NetworkTopologyStrategy',
            'datacenter1': 3
        """
    else:
        replication = """
            'class': 'SimpleStrategy',
            'replication_factor': 1
        """

    await session.aexecute(f"""
        CREATE KEYSPACE IF NOT EXISTS {keyspace}
        WITH replication = {{{replication}}}
        AND durable_writes = true
    """)
    logger.info("keyspace_ready", keyspace=keyspace)


async def init_tables(session, keyspace: str) -> None:
    """Create all feature tables and indexes."""
    for feature, statements in SCHEMA.items():
        for cql_template in statements:
            await session.aexecute(cql_template.format(keyspace=keyspace))
        logger.info("tables_ready", feature=feature, keyspace=keyspace)


async def init_async_cassandra(settings: Settings | None = None):
    """Connect, then create keyspace and tables if they don't exist.

    Returns:
        Cassandra session with aexecute() support
    """
    settings = settings or get_settings()
    keyspace = settings.cassandra_keyspace

    session = AsyncCassandraConnection.connect(settings)
    await init_keyspace(session, keyspace, settings)
    session.set_keyspace(keyspace)
    await init_tables(session, keyspace)

    logger.info("cassandra_initialized", keyspace=keyspace)
    return session


async def shutdown_async_cassandra() -> None:
    """Shutdown Cassandra connection."""
    AsyncCassandraConnection.disconnect()
