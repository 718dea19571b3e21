import secrets

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def new_id(prefix: str) -> str:
    return f"{prefix}_{secrets.token_hex(10)}"
