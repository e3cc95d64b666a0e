import datetime

from sqlalchemy import DateTime, MetaData, func
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

NAMING_CONVENTION = {
    "ix": "%(column_0_label)s_idx",
    "ck": "%(table_name)s_%(constraint_name)s_check",
    "pk": "%(table_name)s_pkey",
}


class Base(DeclarativeBase, AsyncAttrs):
    __abstract__ = True
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class DateTimeMixin:
    """Row insert time, set by the database.

    Log rows are written asynchronously, so this trails the moment the request
    was inspected; models that need that moment store it separately.
    """

    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.current_timestamp(),
    )
