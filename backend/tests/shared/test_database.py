"""Tests for shared/database.py."""

import pytest
from unittest.mock import patch, MagicMock

from shared.database import (
    create_supabase_auth_client,
    get_supabase_client,
    reset_client_cache,
)


class TestSupabaseClient:
    def setup_method(self):
        """Reset cache before each test."""
        reset_client_cache()

    @patch("shared.database.create_client")
    @patch("shared.database.get_settings")
    def test_creates_client_with_service_role_key(self, mock_settings, mock_create):
        mock_settings.return_value.supabase_url = "https://test.supabase.co"
        mock_settings.return_value.supabase_service_role_key = "test-key"
        mock_create.return_value = MagicMock()

        client = get_supabase_client()

        mock_create.assert_called_once_with("https://test.supabase.co", "test-key")
        assert client is mock_create.return_value

    @patch("shared.database.create_client")
    @patch("shared.database.get_settings")
    def test_caches_client(self, mock_settings, mock_create):
        """Should cache the client and not recreate it."""
        mock_settings.return_value.supabase_url = "https://test.supabase.co"
        mock_settings.return_value.supabase_service_role_key = "test-key"
        mock_create.return_value = MagicMock()

        assert get_supabase_client() is get_supabase_client()
        mock_create.assert_called_once()

    @patch("shared.database.get_settings")
    def test_raises_without_config(self, mock_settings):
        mock_settings.return_value.supabase_url = ""
        mock_settings.return_value.supabase_service_role_key = "test-key"

        with pytest.raises(RuntimeError, match="configuration missing"):
            get_supabase_client()

    @patch("shared.database.create_client")
    @patch("shared.database.get_settings")
    def test_reset_client_cache(self, mock_settings, mock_create):
        mock_settings.return_value.supabase_url = "https://test.supabase.co"
        mock_settings.return_value.supabase_service_role_key = "test-key"
        mock_create.side_effect = [MagicMock(name="client1"), MagicMock(name="client2")]

        client1 = get_supabase_client()
        reset_client_cache()
        client2 = get_supabase_client()

        assert mock_create.call_count == 2
        assert client1 is not client2


class TestSupabaseAuthClient:
    @patch("shared.database.create_client")
    @patch("shared.database.get_settings")
    def test_creates_fresh_anon_client_each_call(self, mock_settings, mock_create):
        mock_settings.return_value.supabase_url = "https://test.supabase.co"
        mock_settings.return_value.supabase_anon_key = "anon-key"
        mock_create.side_effect = [MagicMock(), MagicMock()]

        first = create_supabase_auth_client()
        second = create_supabase_auth_client()

        assert first is not second
        args, kwargs = mock_create.call_args
        assert args == ("https://test.supabase.co", "anon-key")

    @patch("shared.database.create_client")
    @patch("shared.database.get_settings")
    def test_session_persistence_option(self, mock_settings, mock_create):
        mock_settings.return_value.supabase_url = "https://test.supabase.co"
        mock_settings.return_value.supabase_anon_key = "anon-key"

        create_supabase_auth_client(persist_session=False)

        options = mock_create.call_args.kwargs["options"]
        assert options.persist_session is False
        assert options.auto_refresh_token is False

    @patch("shared.database.get_settings")
    def test_raises_without_anon_key(self, mock_settings):
        mock_settings.return_value.supabase_url = "https://test.supabase.co"
        mock_settings.return_value.supabase_anon_key = ""

        with pytest.raises(RuntimeError, match="configuration missing"):
            create_supabase_auth_client()
