from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

import mysql.connector
from mysql.connector import pooling
from mysql.connector.errors import PoolError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DBConfig:
    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: str = ""
    database: str = "training_attendance_db"
    # 0 disables pooling: one fresh connection per unit of work
    pool_size: int = 5
    connect_timeout: int = 10

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        defaults = cls()
        return cls(
            host=str(db_config.get("host", defaults.host)),
            port=int(db_config.get("port", defaults.port)),
            user=str(db_config.get("user", defaults.user)),
            password=str(db_config.get("password", defaults.password)),
            database=str(db_config.get("database", defaults.database)),
            pool_size=int(db_config.get("pool_size", defaults.pool_size)),
            connect_timeout=int(db_config.get("connect_timeout", defaults.connect_timeout)),
        )

    def connect_kwargs(self) -> dict:
        return dict(
            host=self.host,
            port=self.port,
            user=self.user,
            password=self.password,
            database=self.database,
            connection_timeout=self.connect_timeout,
            autocommit=False,
        )


class DatabaseConnection:
    """Process-wide connection factory.

    Every repository call borrows one connection for one transaction and gives it back
    (``close()`` returns pooled connections to the pool). Rebuilt when the config changes.
    """

    _instance: Optional["DatabaseConnection"] = None
    _lock = threading.Lock()

    def __init__(self, config: DBConfig):
        self._config = config
        self._pool: Optional[pooling.MySQLConnectionPool] = None
        self._pool_lock = threading.Lock()

    @property
    def config(self) -> DBConfig:
        return self._config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        with cls._lock:
            if cls._instance is None or cls._instance._config != config:
                cls._instance = DatabaseConnection(config)
            return cls._instance

    def _get_pool(self) -> pooling.MySQLConnectionPool:
        # created lazily so building the app never needs a reachable server
        with self._pool_lock:
            if self._pool is None:
                logger.info(
                    "Opening MySQL pool (size=%s) to %s:%s/%s",
                    self._config.pool_size,
                    self._config.host,
                    self._config.port,
                    self._config.database,
                )
                self._pool = pooling.MySQLConnectionPool(
                    pool_name=f"training_attendance_{id(self)}",
                    pool_size=self._config.pool_size,
                    **self._config.connect_kwargs(),
                )
            return self._pool

    def connect(self):
        if self._config.pool_size <= 0:
            return mysql.connector.connect(**self._config.connect_kwargs())
        try:
            return self._get_pool().get_connection()
        except PoolError:
            logger.warning("MySQL pool exhausted; opening a direct connection")
            return mysql.connector.connect(**self._config.connect_kwargs())
