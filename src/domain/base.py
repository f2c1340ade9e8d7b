"""Base classes shared by domain entities"""

import uuid
from sqlalchemy import BigInteger, Integer
from sqlmodel import SQLModel

# SQLite only auto-increments INTEGER primary keys
BigIntPK = BigInteger().with_variant(Integer(), "sqlite")


class BaseModel(SQLModel):
    """Base class for all persisted entities"""
    pass


def generate_uuid() -> str:
    return str(uuid.uuid4())
