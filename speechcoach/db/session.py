from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from speechcoach.core.config import settings

# SQLite connections get shared across FastAPI's threadpool
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    settings.DATABASE_URL,
    echo=False,
    pool_pre_ping=True,
    connect_args=connect_args,
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


# DB session dependency
def get_db():
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()
