"""Tests for the profile repository."""

import asyncio

import pytest

from modules.auth.profiles import USERS_COLLECTION, ProfileRepository
from shared.models import Identity


class TestProfileRepository:
    @pytest.fixture
    def profiles(self, store, clock):
        return ProfileRepository(store, clock=clock)

    @pytest.mark.asyncio
    async def test_get_missing(self, profiles):
        assert await profiles.get("u1") is None

    @pytest.mark.asyncio
    async def test_ensure_creates_once(self, profiles, store, clock):
        identity = Identity(uid="u1", email="student@uwaterloo.ca", email_verified=True)

        created = await profiles.ensure(identity)
        clock.advance(days=1)
        again = await profiles.ensure(identity)

        assert created.created_at == again.created_at
        assert again.email == "student@uwaterloo.ca"
        assert len(await store.query(USERS_COLLECTION)) == 1

    @pytest.mark.asyncio
    async def test_profiles_are_per_user(self, profiles):
        await profiles.ensure(Identity(uid="u1", email="a@uwaterloo.ca"))
        await profiles.ensure(Identity(uid="u2", email="b@uwaterloo.ca"))

        assert (await profiles.get("u2")).email == "b@uwaterloo.ca"

    @pytest.mark.asyncio
    async def test_concurrent_ensure_creates_one_profile(self, profiles, store):
        identity = Identity(uid="u1", email="student@uwaterloo.ca", email_verified=True)

        results = await asyncio.gather(*[profiles.ensure(identity) for _ in range(3)])

        assert all(profile.uid == "u1" for profile in results)
        assert len(await store.query(USERS_COLLECTION)) == 1
