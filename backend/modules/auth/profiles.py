"""
User profile repository.

Keeps one document per user in the `users` collection, created the first
time the user signs in with a verified campus email.
"""

import logging
from typing import Optional

from shared.clock import Clock, from_storage, to_storage, utc_now
from shared.document_store import IDocumentStore
from shared.models import Identity

from .models import UserProfile

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"


class ProfileRepository:
    """Profile documents keyed by uid."""

    def __init__(self, store: IDocumentStore, clock: Optional[Clock] = None):
        self._store = store
        self._clock = clock or utc_now

    async def get(self, uid: str) -> Optional[UserProfile]:
        rows = await self._store.query(USERS_COLLECTION, equals={"uid": uid})
        if not rows:
            return None
        row = rows[0]
        return UserProfile(uid=row["uid"], email=row["email"], created_at=from_storage(row["created_at"]))

    async def ensure(self, identity: Identity) -> UserProfile:
        """
        Return the user's profile, creating it if it doesn't exist.

        Creation is a conditional insert on the uid, so concurrent first
        logins leave exactly one profile.
        """
        profile = await self.get(identity.uid)
        if profile is not None:
            return profile

        created_at = self._clock()
        profile_id = await self._store.insert_within_limit(
            USERS_COLLECTION,
            {
                "uid": identity.uid,
                "email": identity.email,
                "created_at": to_storage(created_at),
            },
            equals={"uid": identity.uid},
            range_filter=None,
            limit=1,
        )
        if profile_id is None:
            return await self.get(identity.uid)

        logger.info("Created profile for %s", identity.uid)
        return UserProfile(uid=identity.uid, email=identity.email, created_at=created_at)
