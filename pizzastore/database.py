import logging
import sqlite3
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Sequence

import psycopg2

from .config import DatabaseConfig

logger = logging.getLogger(__name__)

# money goes in as text so sqlite never sees a binary float
sqlite3.register_adapter(Decimal, str)

Row = list[str | None]

class DatabaseError(Exception):
    """a statement (or the connection) failed in the driver"""

class ConnectionFailure(DatabaseError):
    """could not reach the database at startup"""

# database layer
class DatabaseGateway:
    """owns the one physical connection; every statement uses bound parameters

    statements are written with qmark (?) placeholders, rows come back as
    lists of text (or none for sql null).
    """
    driver_errors: tuple[type[Exception], ...] = ()

    def __init__(self, conn):
        self.conn = conn
        self.in_transaction = False

    def _prepare(self, statement: str) -> str:
        """translate placeholders for the driver"""
        return statement

    def _cursor_execute(self, cur, statement: str, params: tuple):
        cur.execute(statement, params)

    def _run(self, statement: str, params: Sequence[Any]):
        if self.conn is None:
            raise DatabaseError("connection is closed")
        sql = self._prepare(statement)
        params = tuple(params)
        logger.debug("sql: %s | params: %r", " ".join(sql.split()), params)
        cur = self.conn.cursor()
        try:
            self._cursor_execute(cur, sql, params)
        except self.driver_errors as e:
            cur.close()
            raise DatabaseError(str(e).strip()) from e
        return cur

    def execute(self, statement: str, params: Sequence[Any] = ()) -> int:
        """run a write statement; returns affected row count"""
        cur = self._run(statement, params)
        try:
            return cur.rowcount
        finally:
            cur.close()

    def query(self, statement: str, params: Sequence[Any] = ()) -> list[Row]:
        """run a read statement; every non-null value is returned as text"""
        cur = self._run(statement, params)
        try:
            rows = cur.fetchall()
        except self.driver_errors as e:
            raise DatabaseError(str(e).strip()) from e
        finally:
            cur.close()
        return [[None if v is None else str(v) for v in row] for row in rows]

    def query_one(self, statement: str, params: Sequence[Any] = ()) -> Row | None:
        """first row or none"""
        rows = self.query(statement, params)
        return rows[0] if rows else None

    @contextmanager
    def transaction(self):
        """BEGIN ... COMMIT; anything raised inside rolls back and propagates"""
        if self.in_transaction:
            raise DatabaseError("transaction already in progress")
        self.execute("BEGIN;")
        self.in_transaction = True
        try:
            yield self
            self.execute("COMMIT;")
        except BaseException:
            self._rollback()
            raise
        finally:
            self.in_transaction = False

    def _rollback(self):
        try:
            self.execute("ROLLBACK;")
            logger.info("transaction rolled back")
        except DatabaseError as e:
            logger.warning("rollback failed: %s", e)

    def close(self):
        """release the connection (safe to call twice)"""
        if self.conn is None:
            return
        try:
            self.conn.close()
        except self.driver_errors as e:
            logger.warning("error while closing connection: %s", e)
        finally:
            self.conn = None

class SqliteGateway(DatabaseGateway):
    """local sqlite file; creates the schema if missing"""
    # OverflowError: python int wider than a sqlite INTEGER
    driver_errors = (sqlite3.Error, OverflowError)

    def __init__(self, path: str = "pizza-store.db", seed: bool = True):
        try:
            conn = sqlite3.connect(path)
        except sqlite3.Error as e:
            raise ConnectionFailure(f"unable to open {path}: {e}") from e
        conn.autocommit = True
        super().__init__(conn)
        self.execute("--sql\nPRAGMA foreign_keys=ON;")
        self._create_schema()
        if seed:
            self._seed()

    def _create_schema(self):
        """create tables if missing"""
        self.conn.executescript(
            """--sql
            CREATE TABLE IF NOT EXISTS Users (
                login TEXT NOT NULL PRIMARY KEY,
                password TEXT NOT NULL,
                role TEXT NOT NULL,
                favoriteItems TEXT,
                phoneNum TEXT NOT NULL
            );
            CREATE TABLE IF NOT EXISTS Store (
                storeID INTEGER PRIMARY KEY,
                address TEXT NOT NULL,
                city TEXT NOT NULL,
                state TEXT NOT NULL,
                isOpen TEXT NOT NULL,
                reviewScore REAL
            );
            CREATE TABLE IF NOT EXISTS Items (
                itemName TEXT NOT NULL PRIMARY KEY,
                ingredients TEXT NOT NULL,
                typeOfItem TEXT NOT NULL,
                price NUMERIC NOT NULL CHECK (price > 0),
                description TEXT
            );
            CREATE TABLE IF NOT EXISTS FoodOrder (
                orderID INTEGER PRIMARY KEY,
                login TEXT NOT NULL REFERENCES Users(login),
                storeID INTEGER NOT NULL REFERENCES Store(storeID),
                totalPrice NUMERIC NOT NULL DEFAULT 0,
                orderTimestamp TEXT NOT NULL,
                orderStatus TEXT NOT NULL
            );
            CREATE TABLE IF NOT EXISTS ItemsInOrder (
                orderID INTEGER NOT NULL REFERENCES FoodOrder(orderID),
                itemName TEXT NOT NULL REFERENCES Items(itemName),
                quantity INTEGER NOT NULL CHECK (quantity > 0),
                PRIMARY KEY (orderID, itemName)
            );
            """
        )

    def _seed(self):
        """default manager, one store and a starter menu (once)"""
        self.conn.execute(
            """--sql
            INSERT OR IGNORE INTO Users(login, password, role, favoriteItems, phoneNum)
            VALUES ('admin', 'admin', 'manager', NULL, '000-000-0000');
            """
        )
        self.conn.execute(
            """--sql
            INSERT OR IGNORE INTO Store(storeID, address, city, state, isOpen, reviewScore)
            VALUES (1, '900 University Ave', 'Riverside', 'CA', 'yes', 4.5);
            """
        )
        items = [
            ("Pepperoni", "cheese, pepperoni, tomato sauce", "entree", "12.00", "classic pepperoni pizza"),
            ("Margherita", "mozzarella, basil, tomato", "entree", "10.50", "simple and fresh"),
            ("Hawaiian", "ham, pineapple, cheese", "entree", "13.25", "controversial"),
            ("Garlic Bread", "bread, garlic, butter", "side", "4.00", "four pieces"),
            ("Coke", "carbonated water, sugar", "drink", "2.50", "12oz can"),
        ]
        self.conn.executemany(
            """--sql
            INSERT OR IGNORE INTO Items(itemName, ingredients, typeOfItem, price, description)
            VALUES (?, ?, ?, ?, ?);
            """,
            items
        )

class PostgresGateway(DatabaseGateway):
    """network postgres connection via psycopg2; schema must already exist"""
    driver_errors = (psycopg2.Error,)

    def __init__(self, config: DatabaseConfig):
        try:
            conn = psycopg2.connect(
                dbname=config.dbname,
                user=config.user,
                password=config.password,
                host=config.host,
                port=config.port,
            )
        except psycopg2.Error as e:
            raise ConnectionFailure(f"unable to connect to {config.describe()}: {e}") from e
        # explicit BEGIN/COMMIT from transaction(); everything else commits as it runs
        conn.autocommit = True
        super().__init__(conn)

    def _prepare(self, statement: str) -> str:
        """every ? becomes %s, so statements must not contain a literal ? (or %) in strings or comments"""
        return statement.replace("?", "%s")

    def _cursor_execute(self, cur, statement: str, params: tuple):
        cur.execute(statement, params or None)

def open_gateway(config: DatabaseConfig) -> DatabaseGateway:
    """connect to whatever backend the config names"""
    logger.info("connecting to %s", config.describe())
    if config.backend == "postgres":
        return PostgresGateway(config)
    return SqliteGateway(config.sqlite_path)
