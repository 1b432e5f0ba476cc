from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from talentdesk.config import settings

Base = declarative_base()


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "connect_args": {"charset": "utf8mb4", "connect_timeout": 30},
        "pool_pre_ping": True,
        "pool_recycle": 3600,
    }


engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Dependency
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
