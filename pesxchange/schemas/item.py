"""Pydantic schemas for Item listings."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from pesxchange.schemas.user import ProfileStats, UserProfileResponse


class ItemCreate(BaseModel):
    """Schema for creating a new listing. Required fields are checked by the endpoint."""
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    location: Optional[str] = Field(None, max_length=255)
    condition: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    images: List[str] = Field(default_factory=list, description="Base64 data URLs")
    year: Optional[int] = None
    is_available: bool = True


class ItemUpdate(BaseModel):
    """Schema for updating a listing."""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0)
    location: Optional[str] = Field(None, max_length=255)
    condition: Optional[str] = None
    images: Optional[List[str]] = None
    year: Optional[int] = None


class AvailabilityUpdate(BaseModel):
    is_available: bool


class SellerSummary(BaseModel):
    id: UUID
    name: str = "Unknown User"
    rating: float = 0.0
    verified: bool = False


class SellerDetail(SellerSummary):
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    phone: Optional[str] = None
    location: str = "Unknown Location"
    created_at: Optional[datetime] = None


class ItemResponse(BaseModel):
    """Schema for Item response."""
    id: UUID
    title: str
    description: str
    price: float
    location: Optional[str] = None
    condition: Optional[str] = None
    category: str = "Others"
    images: List[str] = []
    views: int = 0
    likes: int = 0
    is_available: bool = True
    created_at: Optional[datetime] = None
    seller: SellerSummary


class ItemDetailResponse(ItemResponse):
    """Detailed listing with the full seller block."""
    year: Optional[int] = None
    category_id: Optional[int] = None
    updated_at: Optional[datetime] = None
    seller: SellerDetail


class ItemLikeResponse(BaseModel):
    """Response for like action."""
    item_id: UUID
    liked: bool
    like_count: int


class OwnItemResponse(BaseModel):
    id: UUID
    title: str
    price: float
    condition: Optional[str] = None
    category: str = "Others"
    images: List[str] = []
    views: int = 0
    likes: int = 0
    is_available: bool = True
    created_at: Optional[datetime] = None


class ProfileResponse(BaseModel):
    """Own profile with listings and stats."""
    profile: UserProfileResponse
    items: List[OwnItemResponse]
    stats: ProfileStats
