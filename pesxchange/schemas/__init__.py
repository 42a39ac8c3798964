from .user import (
	IdentityProfile,
	UserProfileUpdate,
	UserProfileResponse,
	PublicUserResponse,
	PesuLoginRequest,
	PesuLoginResponse,
	LoginUserInfo,
	CheckSrnRequest,
	CheckSrnResponse,
	ProfileStats,
)
from .item import (
	ItemCreate,
	ItemUpdate,
	AvailabilityUpdate,
	ItemResponse,
	ItemDetailResponse,
	ItemLikeResponse,
	OwnItemResponse,
	ProfileResponse,
	SellerSummary,
	SellerDetail,
)
from .message import (
	MessageCreate,
	MessageResponse,
	MessageEvent,
)
from .conversation import ConversationSummary

__all__ = [
	# User
	"IdentityProfile",
	"UserProfileUpdate",
	"UserProfileResponse",
	"PublicUserResponse",
	"PesuLoginRequest",
	"PesuLoginResponse",
	"LoginUserInfo",
	"CheckSrnRequest",
	"CheckSrnResponse",
	"ProfileStats",
	# Item
	"ItemCreate",
	"ItemUpdate",
	"AvailabilityUpdate",
	"ItemResponse",
	"ItemDetailResponse",
	"ItemLikeResponse",
	"OwnItemResponse",
	"ProfileResponse",
	"SellerSummary",
	"SellerDetail",
	# Message
	"MessageCreate",
	"MessageResponse",
	"MessageEvent",
	# Conversation
	"ConversationSummary",
]
