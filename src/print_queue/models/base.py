"""Declarative base for queue database models."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
