"""
Database connection and schema management
A single DuckDB connection guarded by a re-entrant lock

Tables:
- shops / categories / food_items: the catalog (food_items.quantity is stock)
- cart_items: per-user cart lines
- orders: active orders, kept for the retention window
- order_history: permanent copies of paid, COD and archived orders
- reviews: shop reviews
- admin_credentials: shop staff logins
- logs: business operation log
"""

import json
import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional

import duckdb

from .exceptions import BaseApplicationError, ConcurrencyError, DatabaseError
from ..config.settings import settings

logger = logging.getLogger(__name__)

SCHEMA_SQL = r"""
CREATE SEQUENCE IF NOT EXISTS shops_id_seq;
CREATE TABLE IF NOT EXISTS shops (
  shop_id INTEGER DEFAULT nextval('shops_id_seq') PRIMARY KEY,
  shop_name TEXT UNIQUE NOT NULL,
  owner_name TEXT,
  owner_email TEXT,
  owner_mobile TEXT,
  worker_name TEXT,
  latitude DOUBLE,
  longitude DOUBLE,
  created_at TIMESTAMP DEFAULT now()
);

CREATE SEQUENCE IF NOT EXISTS categories_id_seq;
CREATE TABLE IF NOT EXISTS categories (
  category_id INTEGER DEFAULT nextval('categories_id_seq') PRIMARY KEY,
  category_name TEXT UNIQUE NOT NULL,
  description TEXT
);

CREATE SEQUENCE IF NOT EXISTS food_items_id_seq;
CREATE TABLE IF NOT EXISTS food_items (
  food_id INTEGER DEFAULT nextval('food_items_id_seq') PRIMARY KEY,
  food_name TEXT NOT NULL,
  shop_id INTEGER NOT NULL,
  category_id INTEGER,
  price_paise INTEGER NOT NULL,
  food_type TEXT,
  quantity INTEGER DEFAULT 0,  -- units in stock
  description TEXT,
  image_url TEXT,
  is_vegetarian BOOLEAN DEFAULT FALSE,
  is_vegan BOOLEAN DEFAULT FALSE,
  spicy_level INTEGER,
  preparation_time INTEGER,  -- minutes
  created_at TIMESTAMP DEFAULT now(),
  updated_at TIMESTAMP DEFAULT now()
);

CREATE INDEX IF NOT EXISTS idx_food_items_shop ON food_items(shop_id);

CREATE SEQUENCE IF NOT EXISTS cart_items_id_seq;
CREATE TABLE IF NOT EXISTS cart_items (
  cart_item_id INTEGER DEFAULT nextval('cart_items_id_seq') PRIMARY KEY,
  user_id TEXT NOT NULL,
  food_id INTEGER NOT NULL,
  quantity INTEGER NOT NULL,
  price_paise INTEGER NOT NULL,
  created_at TIMESTAMP DEFAULT now(),
  UNIQUE(user_id, food_id)
);

CREATE SEQUENCE IF NOT EXISTS orders_id_seq;
CREATE TABLE IF NOT EXISTS orders (
  order_id INTEGER DEFAULT nextval('orders_id_seq') PRIMARY KEY,
  user_id TEXT NOT NULL,
  user_email TEXT,
  user_phone TEXT,
  order_identifier TEXT,
  items_json JSON,  -- [{food_id, food_name, quantity, price, shop_id, shop_name}]
  subtotal_paise INTEGER NOT NULL,
  tax_paise INTEGER NOT NULL,
  delivery_fee_paise INTEGER NOT NULL,
  total_paise INTEGER NOT NULL,
  payment_method TEXT CHECK(payment_method IN ('cod','online')) NOT NULL,
  order_status BOOLEAN DEFAULT FALSE,  -- paid flag
  status TEXT NOT NULL,
  payment_status BOOLEAN DEFAULT FALSE,
  payment_details_json JSON,
  is_archived BOOLEAN DEFAULT FALSE,
  archived_at TIMESTAMP,
  expires_at TIMESTAMP,
  created_at TIMESTAMP NOT NULL,
  updated_at TIMESTAMP NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_orders_user ON orders(user_id);
CREATE INDEX IF NOT EXISTS idx_orders_identifier ON orders(order_identifier);

CREATE SEQUENCE IF NOT EXISTS order_history_id_seq;
CREATE TABLE IF NOT EXISTS order_history (
  history_id INTEGER DEFAULT nextval('order_history_id_seq') PRIMARY KEY,
  original_order_id INTEGER,
  user_id TEXT NOT NULL,
  user_email TEXT,
  order_identifier TEXT,
  items_json JSON,
  total_paise INTEGER NOT NULL,
  payment_method TEXT,
  status TEXT,
  order_status BOOLEAN DEFAULT FALSE,
  payment_status BOOLEAN DEFAULT FALSE,
  payment_details_json JSON,
  lifecycle_notes TEXT,
  archived_at TIMESTAMP,
  created_at TIMESTAMP,
  updated_at TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_history_user ON order_history(user_id);
CREATE INDEX IF NOT EXISTS idx_history_original ON order_history(original_order_id);

CREATE SEQUENCE IF NOT EXISTS reviews_id_seq;
CREATE TABLE IF NOT EXISTS reviews (
  review_id INTEGER DEFAULT nextval('reviews_id_seq') PRIMARY KEY,
  shop_id INTEGER NOT NULL,
  user_name TEXT NOT NULL,
  user_email TEXT NOT NULL,
  rating INTEGER CHECK(rating BETWEEN 1 AND 5) NOT NULL,
  review_text TEXT NOT NULL,
  is_verified BOOLEAN DEFAULT FALSE,
  helpful_count INTEGER DEFAULT 0,
  created_at TIMESTAMP NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_reviews_shop ON reviews(shop_id);

CREATE SEQUENCE IF NOT EXISTS admin_credentials_id_seq;
CREATE TABLE IF NOT EXISTS admin_credentials (
  credential_id INTEGER DEFAULT nextval('admin_credentials_id_seq') PRIMARY KEY,
  shop_name TEXT UNIQUE NOT NULL,
  admin_username TEXT UNIQUE NOT NULL,
  password_hash TEXT NOT NULL,
  is_active BOOLEAN DEFAULT TRUE,
  last_login TIMESTAMP,
  created_at TIMESTAMP DEFAULT now()
);

CREATE SEQUENCE IF NOT EXISTS logs_id_seq;
CREATE TABLE IF NOT EXISTS logs (
  log_id INTEGER DEFAULT nextval('logs_id_seq') PRIMARY KEY,
  user_id TEXT,  -- user the operation concerns
  actor_id TEXT,  -- who performed it (user, admin username or 'system')
  action TEXT,
  detail_json JSON,
  created_at TIMESTAMP DEFAULT now()
);

CREATE INDEX IF NOT EXISTS idx_logs_user ON logs(user_id);
CREATE INDEX IF NOT EXISTS idx_logs_action ON logs(action);
"""


def _path_from_url(db_url: str) -> str:
    """duckdb://<path> -> <path>"""
    if db_url.startswith("duckdb://"):
        db_url = db_url[len("duckdb://"):]
    if db_url != ":memory:":
        Path(db_url).parent.mkdir(parents=True, exist_ok=True)
    return db_url


class DatabaseManager:
    """Owns the DuckDB connection and wraps every statement"""

    def __init__(self, db_url: Optional[str] = None):
        self._connection: Optional[duckdb.DuckDBPyConnection] = None
        self._lock = threading.RLock()
        self._db_url = db_url or settings.database_url

    @property
    def db_path(self) -> str:
        return _path_from_url(self._db_url)

    @property
    def connection(self) -> duckdb.DuckDBPyConnection:
        with self._lock:
            if self._connection is None:
                self._connection = duckdb.connect(self.db_path)
                self._init_schema()
            return self._connection

    def get_connection(self) -> duckdb.DuckDBPyConnection:
        return self.connection

    def _init_schema(self):
        try:
            try:
                self._connection.execute("INSTALL json")
                self._connection.execute("LOAD json")
            except Exception:
                pass  # JSON extension may be bundled already
            self._connection.execute(SCHEMA_SQL)
        except Exception as e:
            raise DatabaseError(f"Failed to initialize schema: {e}")

    def init_database(self):
        """Open the connection and make sure the schema exists"""
        with self._lock:
            self.connection.execute(SCHEMA_SQL)

    def reset(self, db_url: Optional[str] = None):
        """Close the connection and point the manager at another database"""
        with self._lock:
            if self._connection is not None:
                try:
                    self._connection.close()
                except Exception as e:
                    logger.warning("Closing database connection failed: %s", e)
            self._connection = None
            self._db_url = db_url or settings.database_url

    @contextmanager
    def transaction(self) -> Generator[duckdb.DuckDBPyConnection, None, None]:
        """
        Transaction context manager

        Application errors raised inside the block propagate unchanged after
        rollback; anything else is reported as DatabaseError.
        """
        with self._lock:
            conn = self.connection
            conn.execute("BEGIN TRANSACTION")
            try:
                yield conn
                conn.execute("COMMIT")
            except Exception as e:
                try:
                    conn.execute("ROLLBACK")
                except Exception as rollback_error:
                    logger.warning("Rollback failed: %s", rollback_error)

                if isinstance(e, BaseApplicationError):
                    raise
                if "conflict" in str(e).lower() or "serialization" in str(e).lower():
                    raise ConcurrencyError()
                raise DatabaseError(f"Database operation failed: {e}")

    def execute_query(self, query: str, params: list = None) -> list:
        """Run a statement and return all rows"""
        with self._lock:
            try:
                con = self.connection
                if params:
                    return con.execute(query, params).fetchall()
                return con.execute(query).fetchall()
            except BaseApplicationError:
                raise
            except Exception as e:
                raise DatabaseError(f"Query execution failed: {e}")

    def execute_one(self, query: str, params: list = None) -> Optional[tuple]:
        """Run a statement and return the first row"""
        with self._lock:
            try:
                con = self.connection
                if params:
                    return con.execute(query, params).fetchone()
                return con.execute(query).fetchone()
            except BaseApplicationError:
                raise
            except Exception as e:
                raise DatabaseError(f"Query execution failed: {e}")

    def fetch_dicts(self, query: str, params: list = None) -> List[Dict[str, Any]]:
        """Run a query and return rows as column-keyed dicts"""
        with self._lock:
            try:
                con = self.connection
                cur = con.execute(query, params) if params else con.execute(query)
                columns = [d[0] for d in cur.description]
                return [dict(zip(columns, row)) for row in cur.fetchall()]
            except BaseApplicationError:
                raise
            except Exception as e:
                raise DatabaseError(f"Query execution failed: {e}")

    def fetch_dict(self, query: str, params: list = None) -> Optional[Dict[str, Any]]:
        rows = self.fetch_dicts(query, params)
        return rows[0] if rows else None

    def log_action(self, user_id: Optional[str], actor_id: Optional[str],
                   action: str, detail: Dict[str, Any]):
        """Append a row to the operation log"""
        self.execute_query(
            "INSERT INTO logs(user_id, actor_id, action, detail_json) VALUES (?,?,?,?)",
            [user_id, actor_id, action, json.dumps(detail, default=_json_default)],
        )


def _json_default(value: Any):
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


# Global database manager
db_manager = DatabaseManager()
