"""
auth/dependencies.py -- FastAPI Depends() helpers for request credentials.

Credential extraction only. These helpers pull the raw access token or the
Basic credentials out of the request; they do not decide whether the caller
is allowed in. That decision belongs to AuthorizationGuard, which every
service method runs, so a missing or malformed header simply reaches the
guard as an unknown token (ATHR-001).

Layer rule: no imports from api/ or forum/.
  auth/dependencies.py may import from fastapi (for Request/HTTPException)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import base64
import binascii

from fastapi import HTTPException, Request


def parse_auth_token(authorization: str | None) -> str:
    """Return the token from an authorization header value.

    Accepts both "Bearer <token>" and a bare token. Returns "" when absent.
    """
    if not authorization:
        return ""
    value = authorization.strip()
    if value[:7].lower() == "bearer ":
        return value[7:].strip()
    return value


def get_access_token(request: Request) -> str:
    """Dependency: the caller's access token from the authorization header ("" if none)."""
    return parse_auth_token(request.headers.get("authorization"))


def get_basic_credentials(request: Request) -> tuple[str, str]:
    """Dependency: (username, password) from "authorization: Basic base64(username:password)".

    A missing or undecodable header is a transport error, not a credential
    check, so it answers 401 directly without reaching the verifier.
    """
    header = request.headers.get("authorization", "")
    scheme, _, encoded = header.partition(" ")
    if scheme.lower() != "basic" or not encoded:
        raise HTTPException(
            status_code=401,
            detail={"code": "bad_credentials", "message": "Basic credentials required."},
        )
    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise HTTPException(
            status_code=401,
            detail={"code": "bad_credentials", "message": "Malformed Basic credentials."},
        ) from exc
    username, sep, password = decoded.partition(":")
    if not sep:
        raise HTTPException(
            status_code=401,
            detail={"code": "bad_credentials", "message": "Malformed Basic credentials."},
        )
    return username, password
