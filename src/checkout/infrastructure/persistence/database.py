"""Database layer: SQLAlchemy tables, engine and session setup.

Money columns hold integer minor units (paisa); Python code only ever
sees ``Decimal`` through ``MoneyType``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    TypeDecorator,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship, sessionmaker


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MoneyType(TypeDecorator):
    """Decimal in Python, integer minor units in the database."""

    impl = Integer
    cache_ok = True

    def process_bind_param(self, value: Decimal | None, dialect) -> int | None:
        if value is None:
            return None
        minor = Decimal(value) * 100
        if minor != minor.to_integral_value():
            raise ValueError(f"{value} has sub-minor-unit precision")
        return int(minor)

    def process_result_value(self, value: int | None, dialect) -> Decimal | None:
        if value is None:
            return None
        return Decimal(value).scaleb(-2)


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetimes; SQLite drops tzinfo, so restore UTC on load."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect) -> datetime | None:
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value: datetime | None, dialect) -> datetime | None:
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


# ═══════════════════════════════════════════════════════════════════════════════
# Tables
# ═══════════════════════════════════════════════════════════════════════════════


class Base(DeclarativeBase):
    pass


class ProductRow(Base):
    __tablename__ = "products"
    __table_args__ = (CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="PKR")
    price: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    sale_price: Mapped[Decimal | None] = mapped_column(MoneyType, nullable=True)
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=_utcnow, onupdate=_utcnow
    )


class OrderRow(Base):
    __tablename__ = "orders"
    # Ids of withdrawn orders are never handed out again.
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    checkout_token: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)

    # Customer snapshot (captured at checkout; no account required)
    customer_name: Mapped[str] = mapped_column(String(200), nullable=False)
    customer_phone: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    customer_city: Mapped[str] = mapped_column(String(100), nullable=False)
    customer_address: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    status: Mapped[str] = mapped_column(String(40), nullable=False, index=True)
    payment_status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False, default="cod")

    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="PKR")
    subtotal: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    shipping_fee: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    surcharge: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    discount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    total: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)

    gift_wrapping: Mapped[str] = mapped_column(String(20), nullable=False, default="none")
    gift_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    payment_reference: Mapped[str | None] = mapped_column(String(100), nullable=True, unique=True)
    settlement_reference: Mapped[str | None] = mapped_column(String(100), nullable=True)
    paid_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    handed_off_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    items: Mapped[list[OrderItemRow]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="OrderItemRow.id",
    )


class OrderItemRow(Base):
    __tablename__ = "order_items"
    __table_args__ = (CheckConstraint("quantity >= 1", name="ck_order_items_quantity_positive"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    product_name: Mapped[str] = mapped_column(String(200), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="PKR")
    unit_price: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    line_total: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=_utcnow)

    order: Mapped[OrderRow] = relationship(back_populates="items")


# ═══════════════════════════════════════════════════════════════════════════════
# Engine / sessions
# ═══════════════════════════════════════════════════════════════════════════════


def create_database_engine(url: str, timeout: float = 10.0) -> Engine:
    """Create an engine whose store calls are bounded by ``timeout`` seconds."""
    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            connect_args={"timeout": timeout, "check_same_thread": False},
        )
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine
    return create_engine(url, pool_timeout=timeout, pool_pre_ping=True)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_schema(engine: Engine) -> None:
    Base.metadata.create_all(engine)


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(engine, expire_on_commit=False)
