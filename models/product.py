from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlalchemy import Column, Integer, Float, DateTime, String, Text, JSON, CheckConstraint

from models.base import Base, CamelDTO, utc_now


class Product(Base):
    __tablename__ = 'products'

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    category = Column(String, nullable=False, index=True)
    price = Column(Float, nullable=False)
    discount_percentage = Column(Float, nullable=False, default=0.0)
    rating = Column(Float, nullable=False, default=0.0)
    stock = Column(Integer, nullable=False, default=0)
    tags = Column(JSON, nullable=False, default=list)
    brand = Column(String, nullable=True)
    sku = Column(String, nullable=False, unique=True)
    weight = Column(Float, nullable=True)
    # {"width": .., "height": .., "depth": ..}
    dimensions = Column(JSON, nullable=True)
    warranty_information = Column(String, nullable=True)
    shipping_information = Column(String, nullable=True)
    availability_status = Column(String, nullable=True)
    # [{"rating", "comment", "date", "reviewerName", "reviewerEmail"}]
    reviews = Column(JSON, nullable=False, default=list)
    return_policy = Column(String, nullable=True)
    minimum_order_quantity = Column(Integer, nullable=False, default=1)
    # {"createdAt", "updatedAt", "barcode", "qrCode"} from the catalog source
    meta = Column(JSON, nullable=True)
    images = Column(JSON, nullable=False, default=list)
    thumbnail = Column(String, nullable=False, default="")

    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    __table_args__ = (
        CheckConstraint('price >= 0', name='check_product_price_non_negative'),
        CheckConstraint('stock >= 0', name='check_product_stock_non_negative'),
    )


class ProductDTO(CamelDTO):
    id: int | None = None
    title: str | None = None
    description: str | None = None
    category: str | None = None
    price: float | None = None
    discount_percentage: float | None = None
    rating: float | None = None
    stock: int | None = None
    tags: list[str] | None = None
    brand: str | None = None
    sku: str | None = None
    weight: float | None = None
    dimensions: dict | None = None
    warranty_information: str | None = None
    shipping_information: str | None = None
    availability_status: str | None = None
    reviews: list[dict] | None = None
    return_policy: str | None = None
    minimum_order_quantity: int | None = None
    meta: dict | None = None
    images: list[str] | None = None
    thumbnail: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProductInputDTO(BaseModel):
    """
    Incoming product data, camelCase on the wire (API payloads and the
    dummy products source). Unset fields stay out of model_dump(exclude_unset=True).
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra='ignore')

    title: str | None = None
    description: str | None = None
    category: str | None = None
    price: float | None = Field(default=None, ge=0)
    discount_percentage: float | None = None
    rating: float | None = None
    stock: int | None = Field(default=None, ge=0)
    tags: list[str] | None = None
    brand: str | None = None
    sku: str | None = None
    weight: float | None = None
    dimensions: dict | None = None
    warranty_information: str | None = None
    shipping_information: str | None = None
    availability_status: str | None = None
    reviews: list[dict] | None = None
    return_policy: str | None = None
    minimum_order_quantity: int | None = None
    meta: dict | None = None
    images: list[str] | None = None
    thumbnail: str | None = None
