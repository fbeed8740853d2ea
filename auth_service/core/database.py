from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import declarative_base, sessionmaker
from auth_service.config import settings
from auth_service.utils.logger import db_logger

engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,          # 连接池预检查，防止使用已断开的连接
    pool_recycle=300,
    pool_size=20,
    max_overflow=30,
    pool_timeout=60,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_database(bind=engine):
    """初始化数据库，如果表不存在则自动创建"""
    # 导入所有模型以确保它们被注册到Base.metadata
    import auth_service.models.user  # noqa: F401

    inspector = inspect(bind)
    existing_tables = inspector.get_table_names()
    expected_tables = list(Base.metadata.tables.keys())
    missing_tables = [
        table for table in expected_tables if table not in existing_tables]

    if missing_tables:
        db_logger.warning(f"Missing tables {missing_tables}, creating them")
        Base.metadata.create_all(bind=bind)
    return missing_tables


def get_db():
    """获取数据库会话"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
