"""
Order model for the transport order dashboard
Mirrors the `orders` table written by the ingestion workflow
"""
import enum

from sqlalchemy import Column, Index, JSON, Text

from .base import BaseModel


class OrderStatus(str, enum.Enum):
    """Workflow states as stored in the status column"""
    REVIEW = "Review"
    NEW = "Nieuw"
    IN_PROGRESS = "In Behandeling"
    PROCESSED = "Verwerkt"


class Order(BaseModel):
    """
    A transport order parsed from an incoming email or PDF.

    Python attribute names differ from the column names, which follow the
    upstream producer.
    """
    __tablename__ = "orders"

    # Free text so that unknown upstream values survive untouched
    status = Column(Text, nullable=False, default=OrderStatus.REVIEW.value, index=True)

    # Source email, never edited here
    customer_email = Column("klant_email", Text)
    email_subject = Column("email_onderwerp", Text)
    email_message_id = Column("email_message_id", Text)  # upstream dedup key
    email_body = Column("email_body", Text)
    document_url = Column("pdf_url", Text)

    # May hold a JSON object or the raw (fenced) text the producer wrote
    shipment_data = Column("order_data", JSON)

    __table_args__ = (
        Index("idx_orders_status_created_at", "status", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Order id={self.id} status={self.status!r}>"
