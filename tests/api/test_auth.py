"""Bearer token validation at the API boundary."""

from __future__ import annotations

import jwt
from cryptography.hazmat.primitives.asymmetric import ec
from fastapi.testclient import TestClient

from gradebook.services import token_service
from tests.conftest import mint_token


def test_missing_token_is_401(client: TestClient) -> None:
    resp = client.get("/v1/courses")
    assert resp.status_code == 401


def test_garbage_token_is_401(client: TestClient) -> None:
    resp = client.get("/v1/courses", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid token"


def test_expired_token_is_401(client: TestClient) -> None:
    token = token_service.create_access_token(sub="late", ttl_minutes=-1)
    resp = client.get("/v1/courses", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Token expired"


def test_token_signed_with_other_key_is_401(client: TestClient) -> None:
    forged = jwt.encode(
        {
            "sub": "mallory",
            "iss": token_service.ISSUER,
            "aud": token_service.AUDIENCE,
            "exp": 4_102_444_800,
            "iat": 0,
            "roles": ["admin"],
        },
        ec.generate_private_key(ec.SECP256R1()),
        algorithm="ES256",
    )
    resp = client.get("/v1/courses", headers={"Authorization": f"Bearer {forged}"})
    assert resp.status_code == 401


def test_decoded_claims_carry_roles() -> None:
    claims = token_service.decode_access_token(
        mint_token(username="t-1", roles=["teacher"])
    )
    assert claims["sub"] == "t-1"
    assert claims["roles"] == ["teacher"]
    assert claims["aud"] == "gradebook-service"


def test_default_role_is_student() -> None:
    claims = token_service.decode_access_token(mint_token(username="s-1"))
    assert claims["roles"] == ["student"]
