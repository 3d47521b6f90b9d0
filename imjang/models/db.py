"""SQLAlchemy ORM models for PostgreSQL persistence."""

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class RecordRow(Base):
    __tablename__ = "records"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Property
    type: Mapped[str] = mapped_column(String(10))  # 대지 | 아파트
    area_pyeong: Mapped[int] = mapped_column(Integer)
    price_in_hundred_million: Mapped[float] = mapped_column(Float)

    # Location
    region_si: Mapped[str] = mapped_column(String(10))
    region_gu: Mapped[str] = mapped_column(String(50))
    region_dong: Mapped[str | None] = mapped_column(String(50), nullable=True)
    address_full: Mapped[str | None] = mapped_column(String(255), nullable=True)
    apartment_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Survey notes
    school_accessibility: Mapped[int] = mapped_column(Integer)  # 1-5
    traffic_accessibility: Mapped[str] = mapped_column(String(255), default="")
    is_ltv_regulated: Mapped[bool] = mapped_column(Boolean, default=False)
    ltv_rate: Mapped[int] = mapped_column(Integer)  # 40 | 70
    memo: Mapped[str | None] = mapped_column(Text, nullable=True)
    ai_report: Mapped[str | None] = mapped_column(Text, nullable=True)

    photos: Mapped[list["RecordPhotoRow"]] = relationship(
        back_populates="record", cascade="all, delete-orphan", order_by="RecordPhotoRow.photo_order"
    )
    comments: Mapped[list["CommentRow"]] = relationship(
        back_populates="record", cascade="all, delete-orphan", order_by="CommentRow.created_at"
    )


class RecordPhotoRow(Base):
    __tablename__ = "record_photos"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    record_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("records.id", ondelete="CASCADE"))
    photo_url: Mapped[str] = mapped_column(String(1024))
    photo_order: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    record: Mapped["RecordRow"] = relationship(back_populates="photos")


class CommentRow(Base):
    __tablename__ = "comments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    record_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("records.id", ondelete="CASCADE"))
    user_id: Mapped[str] = mapped_column(String(64))
    content: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    record: Mapped["RecordRow"] = relationship(back_populates="comments")


class SearchHistoryRow(Base):
    __tablename__ = "search_history"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    region_si: Mapped[str] = mapped_column(String(10))
    region_gu: Mapped[str] = mapped_column(String(50))
    searched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class LoanCalculationRow(Base):
    __tablename__ = "loan_calculations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    current_asset: Mapped[float] = mapped_column(Float)
    apartment_price: Mapped[float] = mapped_column(Float)
    ltv_rate: Mapped[int] = mapped_column(Integer)  # 40 | 70
    max_loan_amount: Mapped[float] = mapped_column(Float)
    calculated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class MarketPriceRow(Base):
    __tablename__ = "market_prices"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    region_si: Mapped[str] = mapped_column(String(10))
    region_gu: Mapped[str] = mapped_column(String(50), index=True)
    apartment_name: Mapped[str] = mapped_column(String(100))
    transaction_date: Mapped[str] = mapped_column(String(10), index=True)  # YYYY.MM.DD
    price_in_hundred_million: Mapped[float] = mapped_column(Float)
    area_pyeong: Mapped[int] = mapped_column(Integer)
    floor: Mapped[int] = mapped_column(Integer)
    fetched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
