"""Tests for shared/models.py."""

import pytest
from pydantic import ValidationError

from shared.models import Identity, normalize_email


class TestNormalizeEmail:
    def test_trims_and_lowercases(self):
        assert normalize_email("  Student@UWaterloo.CA ") == "student@uwaterloo.ca"

    def test_none_becomes_empty(self):
        assert normalize_email(None) == ""


class TestIdentity:
    def test_normalizes_email(self):
        identity = Identity(uid="u1", email="Student@UWaterloo.ca")
        assert identity.email == "student@uwaterloo.ca"

    def test_defaults_to_unverified(self):
        assert Identity(uid="u1", email="a@uwaterloo.ca").email_verified is False

    def test_is_frozen(self):
        identity = Identity(uid="u1", email="a@uwaterloo.ca")
        with pytest.raises(ValidationError):
            identity.email_verified = True

    def test_ignores_extra_fields(self):
        identity = Identity(uid="u1", email="a@uwaterloo.ca", role="authenticated")
        assert not hasattr(identity, "role")
