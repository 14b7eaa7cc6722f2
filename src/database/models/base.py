"""Declarative base for all PharmaStock models."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
