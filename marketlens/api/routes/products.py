"""
Product Routes for MarketLens API
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional
from urllib.parse import urlparse
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from ...database import get_db, DatabaseOperations, Platform
from ..schemas import ProductResponse

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_PRICE = 9_999_999_999.99


def check_http_url(value: Optional[str]) -> Optional[str]:
    """Reject anything that is not an absolute http(s) URL"""
    if value is None:
        return value
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"Invalid URL: {value}")
    return value


# ============================================================
# Pydantic Models
# ============================================================

class CreateProductRequest(BaseModel):
    """Request model for attaching a product to a query"""
    query_id: str = Field(..., description="Owning query ID")
    name: str = Field(..., min_length=1)
    url: str = Field(..., description="Product page URL")
    platform: Platform
    image_url: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0, le=MAX_PRICE)
    average_rating: Optional[float] = Field(default=None, ge=0, le=5)
    total_reviews: int = Field(default=0, ge=0)

    class Config:
        use_enum_values = True

    @field_validator("url", "image_url")
    @classmethod
    def validate_urls(cls, v: Optional[str]) -> Optional[str]:
        """Validate url fields as absolute http(s) URLs"""
        return check_http_url(v)


class UpdateProductRequest(BaseModel):
    """Request model for product updates; omitted fields keep their values"""
    name: Optional[str] = Field(default=None, min_length=1)
    url: Optional[str] = None
    platform: Optional[Platform] = None
    image_url: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0, le=MAX_PRICE)
    average_rating: Optional[float] = Field(default=None, ge=0, le=5)
    total_reviews: Optional[int] = Field(default=None, ge=0)

    class Config:
        use_enum_values = True

    @field_validator("url", "image_url")
    @classmethod
    def validate_urls(cls, v: Optional[str]) -> Optional[str]:
        """Validate url fields as absolute http(s) URLs"""
        return check_http_url(v)

    @model_validator(mode="after")
    def reject_null_required_fields(self):
        """name, url, platform and total_reviews may be omitted but not cleared"""
        for name in ("name", "url", "platform", "total_reviews"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


# ============================================================
# Product Endpoints
# ============================================================

@router.post("", response_model=ProductResponse, status_code=201)
async def create_product(
    request: CreateProductRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Attach a product to an existing query

    Raises:
        IntegrityError: Mapped to 409 when the query does not exist
    """
    product = await DatabaseOperations.create_product(db, request.model_dump())
    await db.commit()

    return ProductResponse.model_validate(product)


@router.patch("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    request: UpdateProductRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Update supplied product fields

    Raises:
        RecordNotFoundError: Mapped to 404 when the product does not exist
    """
    product = await DatabaseOperations.update_product(
        db, product_id, request.model_dump(exclude_unset=True)
    )
    await db.commit()

    return ProductResponse.model_validate(product)
