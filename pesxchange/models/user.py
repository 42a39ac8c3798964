"""UserProfile model for students authenticated through PESU Academy."""

import uuid

from sqlalchemy import Column, String, Boolean, Float, Integer, Text, TIMESTAMP, Uuid
from sqlalchemy.sql import func
from ..database import Base


class UserProfile(Base):
    """Student profile created from the identity provider response."""

    __tablename__ = "user_profiles"

    # Primary Key
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Academic identity (from the identity provider)
    srn = Column(String(20), unique=True, nullable=False, index=True)
    prn = Column(String(20))
    name = Column(String(255), nullable=False)
    email = Column(String(255), index=True)
    phone = Column(String(20))
    program = Column(String(100))
    branch = Column(String(100))
    semester = Column(String(20))
    section = Column(String(20))
    campus_code = Column(Integer)
    campus = Column(String(100))

    # Profile
    bio = Column(Text)
    location = Column(String(255))
    year_of_study = Column(String(20))
    avatar_url = Column(Text)
    rating = Column(Float, default=0.0)
    verified = Column(Boolean, default=False)

    # Account Status
    is_active = Column(Boolean, default=True, index=True)

    # Timestamps
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())
