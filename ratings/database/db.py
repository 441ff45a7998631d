from sqlmodel import SQLModel, create_engine, Session
from sqlalchemy.exc import OperationalError
from sqlalchemy import text
import time
import logging
import os

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def build_database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    host = os.getenv("DB_HOST", "postgres")
    name = os.getenv("DB_NAME", "movie_ratings")
    user = os.getenv("DB_USER", "admin")
    password = os.getenv("DB_PASSWORD", "admin")
    return f"postgresql://{user}:{password}@{host}:5432/{name}"


DATABASE_URL = build_database_url()
SQL_ECHO = os.getenv("SQL_ECHO", "").lower() in ("1", "true", "yes")


def make_engine(url: str):
    # connect_timeout is understood by psycopg2 only
    connect_args = {} if url.startswith("sqlite") else {"connect_timeout": 10}
    return create_engine(
        url,
        pool_pre_ping=True,
        connect_args=connect_args,
        echo=SQL_ECHO
    )


engine = make_engine(DATABASE_URL)


class StorageUnavailable(Exception):
    """Raised when no connection to the database can be established."""


def wait_for_db(bind=None):
    bind = bind or engine
    max_retries = int(os.getenv("DB_MAX_RETRIES", "10"))
    retry_delay = float(os.getenv("DB_RETRY_DELAY", "3"))

    for attempt in range(1, max_retries + 1):
        try:
            logger.info(f"Attempt {attempt}/{max_retries}: Connecting to DB...")
            with Session(bind) as session:
                session.execute(text("SELECT 1"))
            logger.info(f"Connected to {bind.dialect.name} database")
            SQLModel.metadata.create_all(bind)
            logger.info("Database tables are ready")
            return
        except OperationalError as e:
            logger.error(f"Connection failed: {type(e).__name__}: {str(e)}")
            if attempt == max_retries:
                raise RuntimeError(f"Failed to connect to DB after {max_retries} attempts")
            time.sleep(retry_delay)


def open_session(bind):
    session = Session(bind)
    try:
        session.connection()
    except OperationalError as e:
        session.close()
        logger.error(f"Connection failed: {str(e)}")
        raise StorageUnavailable(str(e))
    with session:
        yield session


def get_session():
    yield from open_session(engine)
