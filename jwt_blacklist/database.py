from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from jwt_blacklist.config import settings

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db(bind=None):
    # Registers the model on Base.metadata before creating tables
    from jwt_blacklist.models.blacklisted_token import BlacklistedToken  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
