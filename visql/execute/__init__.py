"""visql execution layer: pooled connections and bounded result fetching."""
from visql.execute.connection_manager import ConnectionManager
from visql.execute.engines import EngineFactory, create_datasource_engine

__all__ = ["ConnectionManager", "EngineFactory", "create_datasource_engine"]
