from src.core.database.session import async_session, create_tables, engine, get_db
from src.core.database.base import Base, BaseModel, BigIntPK, MoneyAmount

__all__ = ["async_session", "create_tables", "engine", "get_db", "Base", "BaseModel", "BigIntPK", "MoneyAmount"]
