from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from core.config_loader import DatabaseConfig, load_config


def build_engine(db_config: DatabaseConfig):
    return create_engine(db_config.url, echo=db_config.echo, pool_pre_ping=True)


def build_session_factory(engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


# load_config applies the DATABASE_URL override
_db_config = load_config().database
DATABASE_URL = _db_config.url

engine = build_engine(_db_config)
SessionLocal = build_session_factory(engine)
