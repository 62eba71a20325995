"""SQLAlchemy models for the product catalog.

Defines the ``products`` table used by the database storage backend.
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import DateTime, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from devdaily.domain.entities import Product
from devdaily.domain.enums import ImageSourceType
from devdaily.domain.state_machines import ProductStatus
from devdaily.infrastructure.database import Base


class ProductModel(Base):
    """Persistent product row.

    Attributes:
        id: Auto-increment identifier.
        slug: Unique URL slug.
        market_price: Reference price in IDR with two decimals.
        status: Lifecycle status value.
        badge_ids: Assigned badge ids.
        deleted_at: Soft delete marker.
    """

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    market_price: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    status: Mapped[str] = mapped_column(String(30), nullable=False, default="draft", index=True)
    category_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    badge_ids: Mapped[list[int]] = mapped_column(ARRAY(Integer), nullable=False, default=list)
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    image_path: Mapped[str | None] = mapped_column(String(255), nullable=True)
    image_source_type: Mapped[str] = mapped_column(String(20), nullable=False, default="url")
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    verified_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    archived_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, index=True)
    last_price_update: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_link_check: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<ProductModel(id={self.id}, slug={self.slug}, status={self.status})>"

    def to_entity(self) -> Product:
        return Product(
            id=self.id,
            name=self.name,
            slug=self.slug,
            description=self.description,
            market_price=Decimal(self.market_price),
            status=ProductStatus(self.status),
            category_id=self.category_id,
            badge_ids=list(self.badge_ids or []),
            image_url=self.image_url,
            image_path=self.image_path,
            image_source_type=ImageSourceType(self.image_source_type),
            view_count=self.view_count,
            created_by=self.created_by,
            verified_by=self.verified_by,
            created_at=self.created_at,
            updated_at=self.updated_at,
            published_at=self.published_at,
            verified_at=self.verified_at,
            archived_at=self.archived_at,
            deleted_at=self.deleted_at,
            last_price_update=self.last_price_update,
            last_link_check=self.last_link_check,
        )

    def apply(self, product: Product) -> None:
        """Copy entity state onto the row."""
        self.name = product.name
        self.slug = product.slug
        self.description = product.description
        self.market_price = product.market_price
        self.status = product.status.value
        self.category_id = product.category_id
        self.badge_ids = list(product.badge_ids)
        self.image_url = product.image_url
        self.image_path = product.image_path
        self.image_source_type = product.image_source_type.value
        self.view_count = product.view_count
        self.created_by = product.created_by
        self.verified_by = product.verified_by
        self.created_at = product.created_at
        self.updated_at = product.updated_at
        self.published_at = product.published_at
        self.verified_at = product.verified_at
        self.archived_at = product.archived_at
        self.deleted_at = product.deleted_at
        self.last_price_update = product.last_price_update
        self.last_link_check = product.last_link_check
