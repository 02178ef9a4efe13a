"""Engine configuration loaded from the environment.

Every setting can be overridden with a ``VISQL_``-prefixed environment
variable (``VISQL_MAX_ROWS=500``) or a ``.env`` file.  Pool parameters are
fixed per pool at creation time; changing them only affects pools created
afterwards.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PoolSettings(BaseModel):
    """Bounded connection-pool parameters.

    Attributes:
        max_size: Maximum concurrently checked-out connections.
        connect_timeout: Seconds a caller waits for a free connection (and
            the driver waits to connect) before failing.
        idle_timeout: Seconds after which a pooled connection is recycled.
        pre_ping: Test connections on checkout and replace dead ones.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    max_size: int = Field(5, ge=1, le=50)
    connect_timeout: float = Field(10.0, gt=0, le=300)
    idle_timeout: float = Field(300.0, gt=0, le=86_400)
    pre_ping: bool = True


class EngineSettings(BaseSettings):
    """Process-wide defaults for compilation and execution.

    Attributes:
        max_rows: Hard upper bound on rows returned by one execution.
        default_limit: Row limit used when the caller supplies none.
        pool_max_size: See :attr:`PoolSettings.max_size`.
        pool_connect_timeout: See :attr:`PoolSettings.connect_timeout`.
        pool_idle_timeout: See :attr:`PoolSettings.idle_timeout`.
        pool_pre_ping: See :attr:`PoolSettings.pre_ping`.
        clickhouse_full_join: Whether ClickHouse targets accept FULL OUTER JOIN.
    """

    model_config = SettingsConfigDict(
        env_prefix="VISQL_", env_file=".env", env_ignore_empty=True, extra="ignore"
    )

    max_rows: int = Field(10_000, ge=1)
    default_limit: int = Field(1000, ge=1)
    pool_max_size: int = Field(5, ge=1, le=50)
    pool_connect_timeout: float = Field(10.0, gt=0, le=300)
    pool_idle_timeout: float = Field(300.0, gt=0, le=86_400)
    pool_pre_ping: bool = True
    clickhouse_full_join: bool = True

    def pool_settings(self) -> PoolSettings:
        """Return the per-pool parameters derived from these settings."""
        return PoolSettings(
            max_size=self.pool_max_size,
            connect_timeout=self.pool_connect_timeout,
            idle_timeout=self.pool_idle_timeout,
            pre_ping=self.pool_pre_ping,
        )
