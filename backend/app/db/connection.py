# backend/app/db/connection.py
import psycopg2
from psycopg2 import pool
from psycopg2.extras import RealDictCursor
from contextlib import contextmanager
from loguru import logger

from backend.app.config import settings

_connection_pool = None


def initialize_connection_pool():
    global _connection_pool
    if _connection_pool is not None:
        logger.debug("Store database connection pool already initialized.")
        return

    db = settings.database
    try:
        logger.info(f"Initializing store database pool ({db.host}:{db.port}/{db.dbname})...")
        _connection_pool = pool.SimpleConnectionPool(
            minconn=db.min_connections,
            maxconn=db.max_connections,
            user=db.user,
            password=db.password,
            host=db.host,
            port=db.port,
            dbname=db.dbname,
        )
        logger.success(
            f"Store database pool initialized (min: {db.min_connections}, max: {db.max_connections})."
        )
    except (Exception, psycopg2.DatabaseError) as error:
        logger.critical(f"Error while initializing store database pool: {error}")
        _connection_pool = None
        raise ConnectionError(f"Failed to initialize DB pool: {error}") from error


def close_connection_pool():
    global _connection_pool

    if _connection_pool:
        logger.info("Closing store database pool...")
        _connection_pool.closeall()
        _connection_pool = None
        logger.info("Store database pool closed.")


@contextmanager
def get_db_connection():
    if _connection_pool is None:
        logger.warning("Store database pool is not initialized. Attempting to initialize now.")
        initialize_connection_pool()

    conn = _connection_pool.getconn()
    logger.trace("Connection acquired from pool.")
    try:
        yield conn
    finally:
        _connection_pool.putconn(conn)
        logger.trace("Connection returned to pool.")


def fetch_one(query, params=None):
    try:
        with get_db_connection() as conn:
            with conn.cursor(cursor_factory=RealDictCursor) as cursor:
                cursor.execute(query, params)
                return cursor.fetchone()
    except (Exception, psycopg2.Error) as error:
        logger.error(f"DB Error in fetch_one for query '{query.strip()[:100]}...': {error}")
        raise


def execute_transaction(statements):
    """Run ``(query, params)`` pairs on one connection and commit them together."""
    with get_db_connection() as conn:
        try:
            with conn.cursor() as cursor:
                for query, params in statements:
                    cursor.execute(query, params)
            conn.commit()
            return True
        except (Exception, psycopg2.Error) as error:
            conn.rollback()
            logger.error(f"DB Error in execute_transaction, rolled back: {error}")
            raise
