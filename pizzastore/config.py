import os
from argparse import Namespace
from dataclasses import dataclass

BACKENDS = ("sqlite", "postgres")

@dataclass
class DatabaseConfig:
    """where the store database lives (cli options win over environment)"""
    backend: str = "sqlite"
    sqlite_path: str = "pizza-store.db"
    host: str = "localhost"
    port: int = 5432
    dbname: str = "pizzastore"
    user: str = "postgres"
    password: str = ""

    @classmethod
    def from_env(cls) -> "DatabaseConfig":
        """defaults overridden by PIZZASTORE_* / POSTGRES_* variables"""
        return cls(
            backend=os.getenv("PIZZASTORE_BACKEND", "sqlite").lower(),
            sqlite_path=os.getenv("PIZZASTORE_SQLITE_PATH", "pizza-store.db"),
            host=os.getenv("POSTGRES_HOST", "localhost"),
            port=int(os.getenv("POSTGRES_PORT", "5432")),
            dbname=os.getenv("POSTGRES_DB", "pizzastore"),
            user=os.getenv("POSTGRES_USER", "postgres"),
            password=os.getenv("POSTGRES_PASSWORD", ""),
        )

    @classmethod
    def from_args(cls, args: Namespace) -> "DatabaseConfig":
        """merge parsed cli options on top of the environment"""
        config = cls.from_env()
        for field in ("backend", "sqlite_path", "host", "port", "dbname", "user", "password"):
            value = getattr(args, field, None)
            if value is not None:
                setattr(config, field, value)
        if config.backend not in BACKENDS:
            raise ValueError(f"unknown backend '{config.backend}' (expected one of {', '.join(BACKENDS)})")
        return config

    def describe(self) -> str:
        """connection target without credentials"""
        if self.backend == "sqlite":
            return f"sqlite:{self.sqlite_path}"
        return f"postgresql://{self.host}:{self.port}/{self.dbname}"
