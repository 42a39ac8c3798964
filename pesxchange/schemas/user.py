"""Pydantic schemas for `UserProfile` domain objects."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class IdentityProfile(BaseModel):
	"""Profile block returned by the PESU Academy identity provider."""
	name: str
	srn: str
	prn: Optional[str] = None
	program: Optional[str] = None
	branch: Optional[str] = None
	semester: Optional[str] = None
	section: Optional[str] = None
	email: Optional[str] = None
	phone: Optional[str] = None
	campus_code: Optional[int] = None
	campus: Optional[str] = None

	model_config = ConfigDict(extra="ignore")


class UserProfileUpdate(BaseModel):
	name: Optional[str] = Field(None, min_length=1, max_length=255)
	bio: Optional[str] = Field(None, max_length=1000)
	phone: Optional[str] = Field(None, max_length=20)
	year_of_study: Optional[str] = Field(None, max_length=20)
	branch: Optional[str] = Field(None, max_length=100)
	location: Optional[str] = Field(None, max_length=255)

	model_config = ConfigDict(json_schema_extra={
		"example": {
			"bio": "Selling my first-year books",
			"phone": "9876543210",
			"location": "RR Campus",
		}
	})


class UserProfileResponse(BaseModel):
	id: UUID
	srn: str
	prn: Optional[str] = None
	name: str
	email: Optional[str] = None
	phone: Optional[str] = None
	program: Optional[str] = None
	branch: Optional[str] = None
	semester: Optional[str] = None
	section: Optional[str] = None
	campus: Optional[str] = None
	bio: Optional[str] = None
	location: Optional[str] = None
	year_of_study: Optional[str] = None
	avatar_url: Optional[str] = None
	rating: float = 0.0
	verified: bool = False
	created_at: Optional[datetime] = None
	updated_at: Optional[datetime] = None

	model_config = ConfigDict(from_attributes=True)


class PublicUserResponse(BaseModel):
	"""Fields safe to show to any authenticated user."""
	id: UUID
	name: str
	srn: str
	verified: bool = False
	rating: float = 0.0
	created_at: Optional[datetime] = None

	model_config = ConfigDict(from_attributes=True)


class PesuLoginRequest(BaseModel):
	# Optional so missing fields surface as 400 from the endpoint, not 422
	username: Optional[str] = None
	password: Optional[str] = None

	model_config = ConfigDict(json_schema_extra={
		"example": {
			"username": "PES2UG24CS453",
			"password": "secret",
		}
	})


class LoginUserInfo(BaseModel):
	id: UUID
	srn: str
	name: str
	email: Optional[str] = None


class PesuLoginResponse(BaseModel):
	user: LoginUserInfo
	access_token: str
	token_type: str = "bearer"


class CheckSrnRequest(BaseModel):
	srn: Optional[str] = None


class CheckSrnResponse(BaseModel):
	exists: bool
	message: str


class ProfileStats(BaseModel):
	total_items_listed: int = 0
	total_views: int = 0
	total_likes: int = 0
	average_rating: float = 0.0
