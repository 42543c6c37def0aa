"""
Tests for tenant bearer tokens.
"""

import base64
import time

from callcenter.api.auth import issue_token, verify_token

SECRET = "token-secret"
TTL = 3600


class TestTokens:
    def test_round_trip(self):
        token = issue_token(7, 3, SECRET)
        assert verify_token(token, SECRET, TTL) == (7, 3)

    def test_without_user(self):
        token = issue_token(7, None, SECRET)
        assert verify_token(token, SECRET, TTL) == (7, None)

    def test_tokens_are_unique(self):
        assert issue_token(7, 3, SECRET) != issue_token(7, 3, SECRET)

    def test_wrong_secret(self):
        token = issue_token(7, 3, SECRET)
        assert verify_token(token, "other-secret", TTL) is None

    def test_tampered_client_id(self):
        raw = base64.urlsafe_b64decode(issue_token(7, 3, SECRET)).decode()
        forged = base64.urlsafe_b64encode(("8" + raw[1:]).encode()).decode()
        assert verify_token(forged, SECRET, TTL) is None

    def test_expired(self):
        token = issue_token(7, 3, SECRET, issued_at=int(time.time()) - TTL - 10)
        assert verify_token(token, SECRET, TTL) is None

    def test_garbage(self):
        assert verify_token("not base64 at all!", SECRET, TTL) is None
        assert verify_token("", SECRET, TTL) is None
        assert verify_token(base64.urlsafe_b64encode(b"a:b").decode(), SECRET, TTL) is None
