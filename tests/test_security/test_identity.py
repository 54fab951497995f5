"""Tests for bearer token handling."""
from __future__ import annotations

import jwt
import pytest
from fastapi import HTTPException
from starlette.requests import Request

from hr_authz.security.identity import decode_user_id, extract_bearer_token, issue_token
from hr_authz.settings import Settings

SECRET = "identity-test-secret-with-enough-length"


@pytest.fixture
def settings():
    return Settings(jwt_secret=SECRET)


def _request(authorization: str | None = None) -> Request:
    headers = []
    if authorization is not None:
        headers.append((b"authorization", authorization.encode()))
    return Request({"type": "http", "method": "GET", "path": "/me", "headers": headers, "query_string": b""})


def test_missing_header_is_none():
    assert extract_bearer_token(_request()) is None


def test_bearer_token_is_extracted():
    assert extract_bearer_token(_request("Bearer abc.def")) == "abc.def"


@pytest.mark.parametrize("header", ["Token abc", "Bearer ", "bearer abc"])
def test_malformed_header_is_400(header):
    with pytest.raises(HTTPException) as exc_info:
        extract_bearer_token(_request(header))
    assert exc_info.value.status_code == 400


def test_token_round_trip(settings):
    token = issue_token(42, settings)
    assert decode_user_id(token, settings) == 42


def test_expired_token_is_401(settings):
    token = issue_token(42, settings, expires_minutes=-5)
    with pytest.raises(HTTPException) as exc_info:
        decode_user_id(token, settings)
    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "Token expired"


def test_wrong_signature_is_401(settings):
    token = issue_token(42, Settings(jwt_secret="another-secret-with-enough-length-too"))
    with pytest.raises(HTTPException) as exc_info:
        decode_user_id(token, settings)
    assert exc_info.value.status_code == 401


def test_non_numeric_subject_is_401(settings):
    token = jwt.encode({"sub": "alice"}, SECRET, algorithm="HS256")
    with pytest.raises(HTTPException) as exc_info:
        decode_user_id(token, settings)
    assert exc_info.value.status_code == 401
