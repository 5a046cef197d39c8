import httpx
from typing import Any, Dict, List, Optional
from socratix.config import settings


class SupabaseClient:
    """Client for the Supabase REST (PostgREST) and auth endpoints."""

    def __init__(
        self,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (url or settings.supabase_url or "").rstrip("/")
        self.api_key = api_key or settings.supabase_key
        self._transport = transport
        self._headers = {
            "apikey": self.api_key or "",
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=30.0)

    async def select(
        self,
        table: str,
        filters: Optional[Dict[str, str]] = None,
        columns: str = "*",
        order: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Select rows; filters use PostgREST operators, e.g. {"id": "eq.42"}."""
        params = {"select": columns}
        params.update(filters or {})
        if order:
            params["order"] = order

        async with self._client() as client:
            response = await client.get(
                f"{self.base_url}/rest/v1/{table}",
                headers=self._headers,
                params=params,
            )
            response.raise_for_status()
            return response.json()

    async def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a row and return its stored representation."""
        async with self._client() as client:
            response = await client.post(
                f"{self.base_url}/rest/v1/{table}",
                headers={**self._headers, "Prefer": "return=representation"},
                json=row,
            )
            response.raise_for_status()
            return response.json()[0]

    async def upsert(self, table: str, row: Dict[str, Any]) -> None:
        async with self._client() as client:
            response = await client.post(
                f"{self.base_url}/rest/v1/{table}",
                headers={**self._headers, "Prefer": "resolution=merge-duplicates"},
                json=row,
            )
            response.raise_for_status()

    async def update(
        self,
        table: str,
        filters: Dict[str, str],
        values: Dict[str, Any],
    ) -> List[Dict[str, Any]]:
        async with self._client() as client:
            response = await client.patch(
                f"{self.base_url}/rest/v1/{table}",
                headers={**self._headers, "Prefer": "return=representation"},
                params=filters,
                json=values,
            )
            response.raise_for_status()
            return response.json()

    async def delete(self, table: str, filters: Dict[str, str]) -> None:
        async with self._client() as client:
            response = await client.delete(
                f"{self.base_url}/rest/v1/{table}",
                headers=self._headers,
                params=filters,
            )
            response.raise_for_status()

    async def get_user(self, access_token: str) -> Optional[Dict[str, Any]]:
        """Resolve an access token to the Supabase auth user, or None."""
        async with self._client() as client:
            response = await client.get(
                f"{self.base_url}/auth/v1/user",
                headers={"apikey": self.api_key or "", "Authorization": f"Bearer {access_token}"},
            )
            if response.status_code in (401, 403):
                return None
            response.raise_for_status()
            return response.json()
