"""CRUD operations for `UserProfile` model."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from pesxchange.crud.base import CRUDBase
from pesxchange.models.user import UserProfile
from pesxchange.schemas.user import IdentityProfile, UserProfileUpdate


class CRUDUser(CRUDBase[UserProfile, IdentityProfile, UserProfileUpdate]):
    def get_by_srn(self, db: Session, srn: str) -> Optional[UserProfile]:
        stmt = select(UserProfile).where(UserProfile.srn == srn.upper()).limit(1)
        return db.scalars(stmt).first()

    def get_many(self, db: Session, ids: Iterable[UUID]) -> List[UserProfile]:
        """Batch lookup for a set of ids (one query, not N)."""
        id_list = list(ids)
        if not id_list:
            return []
        stmt = select(UserProfile).where(UserProfile.id.in_(id_list))
        return list(db.scalars(stmt).all())

    def get_map(self, db: Session, ids: Iterable[UUID]) -> Dict[UUID, UserProfile]:
        return {user.id: user for user in self.get_many(db, ids)}

    def upsert_from_identity(self, db: Session, *, profile_in: IdentityProfile) -> UserProfile:
        """Create or refresh a profile from the identity provider's data, keyed by SRN."""
        data = profile_in.model_dump(exclude_none=True)
        data["srn"] = data["srn"].upper()

        user = self.get_by_srn(db, data["srn"])
        if user is None:
            user = UserProfile(**data)
        else:
            for field, value in data.items():
                setattr(user, field, value)

        try:
            db.add(user)
            db.commit()
            db.refresh(user)
        except Exception:
            db.rollback()
            raise
        return user


# Singleton instance
crud_user = CRUDUser(UserProfile)
