"""Tests for masking utilities."""

import pytest

from login_wizard.utils.masking import (
    mask_email,
    mask_identifier,
    mask_secret,
    mask_sensitive_dict,
)


class TestMaskEmail:
    """Test mask_email function."""

    def test_mask_email_basic(self):
        assert mask_email("user@example.com") == "u***@e***.com"

    def test_mask_email_subdomain(self):
        assert mask_email("john@mail.example.co.uk") == "j***@m***.example.co.uk"

    @pytest.mark.parametrize("value", ["", "not-an-email", "a@b@c"])
    def test_mask_email_invalid(self, value):
        """Test invalid addresses are fully masked."""
        assert mask_email(value) == "***"

    def test_mask_email_domain_without_dot(self):
        assert mask_email("user@localhost") == "u***@***"


class TestMaskIdentifier:
    """Test mask_identifier function."""

    def test_email_identifier(self):
        assert mask_identifier("alice@example.org") == "a***@e***.org"

    def test_user_id(self):
        assert mask_identifier("@alice:example.org") == "@a***"

    def test_user_name(self):
        assert mask_identifier("alice") == "a***"

    def test_empty(self):
        assert mask_identifier("") == "***"


class TestMaskSecret:
    """Test mask_secret function."""

    def test_mask_secret_keeps_tail(self):
        assert mask_secret("1b4e28ba-2fa1-11d2") == "***11d2"

    @pytest.mark.parametrize("value", [None, "", "short", "12345678"])
    def test_mask_secret_short(self, value):
        """Test short secrets reveal nothing."""
        assert mask_secret(value) == "***"


class TestMaskSensitiveDict:
    """Test mask_sensitive_dict function."""

    def test_mask_nested_request_body(self):
        """Test a password reset confirmation body is fully masked."""
        body = {
            "auth": {
                "type": "m.login.email.identity",
                "threepid_creds": {"client_secret": "abc", "sid": "sid-1"},
            },
            "new_password": "hunter2",
        }

        masked = mask_sensitive_dict(body)

        assert masked["new_password"] == "********"
        assert masked["auth"]["threepid_creds"] == {"client_secret": "********", "sid": "sid-1"}
        assert masked["auth"]["type"] == "m.login.email.identity"
        assert body["new_password"] == "hunter2"

    def test_mask_email_fields(self):
        masked = mask_sensitive_dict({"email": "user@example.com", "send_attempt": 2})
        assert masked == {"email": "u***@e***.com", "send_attempt": 2}

    def test_mask_list_of_dicts(self):
        masked = mask_sensitive_dict({"items": [{"token": "t"}, "plain"]})
        assert masked == {"items": [{"token": "********"}, "plain"]}

    def test_custom_keys(self):
        """Test custom key set replaces the defaults."""
        masked = mask_sensitive_dict({"password": "p", "pin": "1234"}, sensitive_keys={"pin"})
        assert masked == {"password": "p", "pin": "********"}
