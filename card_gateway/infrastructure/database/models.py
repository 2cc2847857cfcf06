"""SQLAlchemy ORM models for credit card applications."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, String, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class ApplicationModel(Base):
    """
    Persisted credit card application.

    Each value object is stored as its own JSON document. Status, number
    and document are duplicated into plain columns for lookups.
    """

    __tablename__ = "card_applications"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True)
    application_number: Mapped[str] = mapped_column(
        String(40),
        nullable=False,
        unique=True,
        index=True,
    )
    status: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    document_type: Mapped[str] = mapped_column(String(8), nullable=False)
    document_number: Mapped[str] = mapped_column(String(32), nullable=False, index=True)

    personal_data: Mapped[dict] = mapped_column(JSON, nullable=False)
    employment_data: Mapped[dict] = mapped_column(JSON, nullable=False)
    product_request: Mapped[dict] = mapped_column(JSON, nullable=False)
    consents: Mapped[dict] = mapped_column(JSON, nullable=False)
    validation_state: Mapped[dict] = mapped_column(JSON, nullable=False)
    core_integration: Mapped[dict] = mapped_column(JSON, nullable=False)
    status_history: Mapped[list] = mapped_column(JSON, nullable=False)
    # "metadata" is reserved on declarative classes
    app_metadata: Mapped[dict] = mapped_column("metadata", JSON, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
