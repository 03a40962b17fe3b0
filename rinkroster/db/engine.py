from dotenv import load_dotenv
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from rinkroster.core.config import settings

# Load .env for local dev
load_dotenv()

DATABASE_URL = settings.DATABASE_URL or "sqlite:///./rinkroster.db"


def _sqlite_in_memory(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


def build_engine(url: str, **overrides) -> Engine:
    kwargs = dict(pool_pre_ping=True, echo=False, future=True)
    connect_args = {}
    if url.startswith("postgresql"):
        connect_args = {
            "keepalives": 1,
            "keepalives_idle": 30,     # seconds before starting keepalives
            "keepalives_interval": 10,
            "keepalives_count": 5,
        }
        kwargs.update(pool_recycle=300, pool_size=10, max_overflow=10, pool_timeout=10)
    elif url.startswith("sqlite"):
        # FastAPI runs sync routes in a threadpool
        connect_args = {"check_same_thread": False}
    connect_args.update(overrides.pop("connect_args", {}))
    kwargs["connect_args"] = connect_args
    kwargs.update(overrides)
    eng = create_engine(url, **kwargs)

    if url.startswith("sqlite"):
        serialize = not _sqlite_in_memory(url)

        @event.listens_for(eng, "connect")
        def _sqlite_connect(dbapi_conn, _record):
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA foreign_keys=ON")
            cur.close()
            if serialize:
                # hand transaction control to the "begin" hook below
                dbapi_conn.isolation_level = None

        if serialize:
            # No row locks in SQLite: take the write lock when the transaction
            # starts so check-then-write sequences run one at a time
            @event.listens_for(eng, "begin")
            def _sqlite_begin(conn):
                conn.exec_driver_sql("BEGIN IMMEDIATE")

    return eng


engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,
    future=True,
)
