"""
Trade data administration.

Uploading, summarising and clearing the trade-data collection are
admin-only and go out with the admin token (adminToken), never the user
token. Analytics and filtered reads are public.
"""

from pathlib import Path
from typing import Optional, Dict, Any

from market_navigator.api import read_upload, PathLike
from market_navigator.api_client import ApiClient
from market_navigator.exceptions import AdminAuthRequiredError


class TradeDataApi:
    """Trade data endpoints over the admin ApiClient"""

    def __init__(self, admin_client: ApiClient):
        self.client = admin_client

    def _require_admin_token(self) -> None:
        if not self.client.token_store.has_token():
            raise AdminAuthRequiredError("Admin login required to manage trade data")

    async def upload_csv(self, path: PathLike) -> Dict[str, Any]:
        """Bulk-load a CSV export into the trade-data collection"""
        csv_path = Path(path)
        if csv_path.suffix.lower() != ".csv":
            raise ValueError(f"Only .csv files can be uploaded: {csv_path.name}")
        self._require_admin_token()

        filename, content, _ = await read_upload(csv_path)
        return await self.client.request(
            "/trade-data/upload",
            "POST",
            files=[("csvFile", (filename, content, "text/csv"))],
        )

    async def get_summary(self) -> Dict[str, Any]:
        self._require_admin_token()
        return await self.client.get("/trade-data/summary")

    async def clear(self) -> Dict[str, Any]:
        """Delete every trade-data record"""
        self._require_admin_token()
        return await self.client.delete("/trade-data/clear")

    async def get_analytics(self, sector: Optional[str] = None) -> Dict[str, Any]:
        return await self.client.get("/trade-data/analytics", params={"sector": sector}, auth=False)

    async def get_filtered(
        self,
        sector: Optional[str] = None,
        partner: Optional[str] = None,
        year: Optional[int] = None,
        start_year: Optional[int] = None,
        end_year: Optional[int] = None
    ) -> Dict[str, Any]:
        params = {
            "sector": sector,
            "partner": partner,
            "year": year,
            "startYear": start_year,
            "endYear": end_year,
        }
        return await self.client.get("/trade-data/filtered", params=params, auth=False)
