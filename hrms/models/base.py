"""Shared column helpers and mixins for models."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import declared_attr


def utcnow() -> datetime:
    """Naive UTC timestamp, the format every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    """Opaque string identifier used as primary key."""
    return str(uuid.uuid4())


def uuid_pk() -> Column:
    return Column(String(36), primary_key=True, default=new_id)


class TimestampMixin:
    """Mixin that adds created_at and updated_at columns."""

    @declared_attr
    def created_at(cls):
        return Column(DateTime, default=utcnow, nullable=False)

    @declared_attr
    def updated_at(cls):
        return Column(DateTime, onupdate=utcnow, nullable=True)
