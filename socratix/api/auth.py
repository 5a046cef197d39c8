"""Resolution of the current learner from the Authorization header."""
import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx
from pydantic import BaseModel

from socratix.api.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)


class User(BaseModel):
    id: str
    email: Optional[str] = None


class AuthProvider(ABC):

    @abstractmethod
    async def get_user(self, token: str) -> Optional[User]:
        """Return the user the token belongs to, or None."""


class StaticAuthProvider(AuthProvider):
    """Development provider: the bearer token is the user id."""

    async def get_user(self, token: str) -> Optional[User]:
        token = token.strip()
        return User(id=token) if token else None


class SupabaseAuthProvider(AuthProvider):

    def __init__(self, client: Optional[SupabaseClient] = None):
        self.client = client or SupabaseClient()

    async def get_user(self, token: str) -> Optional[User]:
        try:
            data = await self.client.get_user(token)
        except httpx.HTTPError as e:
            logger.error("Auth lookup failed: %s", e)
            return None
        if not data or not data.get("id"):
            return None
        return User(id=str(data["id"]), email=data.get("email"))


def parse_bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    return authorization[len("Bearer "):]
