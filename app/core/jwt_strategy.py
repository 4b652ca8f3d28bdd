import json
import time
from pathlib import Path
from typing import Any, Dict, Optional

import jwt
from jwcrypto import jwk
from fastapi_users import exceptions, models
from fastapi_users.authentication.strategy.jwt import JWTStrategy

from app.core.config import settings


def load_or_create_signing_key(key_file: Path) -> jwk.JWK:
    """Load the RSA signing key from ``key_file``, generating it on first use."""
    if key_file.exists():
        return jwk.JWK.from_pem(key_file.read_bytes())

    key = jwk.JWK.generate(kty="RSA", size=2048)
    key_file.parent.mkdir(parents=True, exist_ok=True)
    key_file.write_bytes(key.export_to_pem(private_key=True, password=None))
    return key


class RS256JWTStrategyWithKid(JWTStrategy[models.UP, models.ID]):
    """fastapi-users JWT strategy signing with RS256 and a ``kid`` header.

    Tokens carry ``sub``/``user_id``/``email`` claims plus issuer and audience
    from settings; the public key is published as a JWKS document.
    """

    def __init__(
        self,
        lifetime_seconds: int,
        key_id: str = "v1",
        *,
        key_file: Optional[Path] = None,
        issuer: Optional[str] = None,
        audience: Optional[str] = None,
    ):
        self.key_id = key_id
        self.issuer = issuer or settings.jwt.issuer
        self.rsa_key = load_or_create_signing_key(
            key_file or Path(settings.jwt.key_file)
        )

        super().__init__(
            secret=self.rsa_key.export_to_pem(private_key=True, password=None),
            lifetime_seconds=lifetime_seconds,
            token_audience=[audience or settings.jwt.application_id],
            algorithm="RS256",
            public_key=self.rsa_key.export_to_pem(private_key=False, password=None),
        )

        self.public_jwk = json.loads(self.rsa_key.export_public())
        self.public_jwk["kid"] = self.key_id
        self.public_jwk["alg"] = "RS256"
        self.public_jwk["use"] = "sig"

    async def write_token(self, user: models.UP) -> str:
        now = int(time.time())
        data: Dict[str, Any] = {
            "sub": f"user:{user.id}",
            "user_id": str(user.id),
            "aud": self.token_audience,
            "iss": self.issuer,
            "iat": now,
        }
        if self.lifetime_seconds:
            data["exp"] = now + self.lifetime_seconds
        if getattr(user, "email", None):
            data["email"] = str(user.email)

        return jwt.encode(
            data,
            self.encode_key,
            algorithm=self.algorithm,
            headers={"kid": self.key_id},
        )

    async def read_token(
        self, token: Optional[str], user_manager
    ) -> Optional[models.UP]:
        if token is None:
            return None

        try:
            payload = jwt.decode(
                token,
                self.decode_key,
                algorithms=[self.algorithm],
                audience=self.token_audience,
                issuer=self.issuer,
            )
        except jwt.PyJWTError:
            return None

        user_id = payload.get("user_id")
        if user_id is None:
            return None

        try:
            parsed_id = user_manager.parse_id(user_id)
            return await user_manager.get(parsed_id)
        except (exceptions.UserNotExists, exceptions.InvalidID):
            return None

    def get_jwks(self) -> Dict[str, Any]:
        """JWKS document for public key distribution."""
        return {"keys": [self.public_jwk]}
