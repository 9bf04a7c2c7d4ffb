from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session
from app.core.config import settings

# check_same_thread is needed for SQLite, remove for PostgreSQL
connect_args = {"check_same_thread": False} if "sqlite" in settings.DATABASE_URL else {}
engine_kwargs = {}
if settings.DATABASE_URL in ("sqlite://", "sqlite:///:memory:"):
    # One shared connection, otherwise every checkout sees an empty database
    engine_kwargs["poolclass"] = StaticPool
engine = create_engine(settings.DATABASE_URL, connect_args=connect_args, **engine_kwargs)

def get_session():
    with Session(engine) as session:
        yield session

def create_db_and_tables():
    SQLModel.metadata.create_all(engine)
