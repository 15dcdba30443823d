"""
Market Navigator - REST endpoint wrappers
One method per backend endpoint used by the exporter/buyer dashboards.
"""

import mimetypes
from pathlib import Path
from typing import Optional, Dict, Any, List, Tuple, Union

import aiofiles

from market_navigator.api_client import ApiClient
from market_navigator.models import SignupData, ProfileUpdate


MAX_UPLOAD_FILES = 5

PathLike = Union[str, Path]


async def read_upload(path: PathLike) -> Tuple[str, bytes, str]:
    """Read a file for a multipart upload as (filename, content, mime type)"""
    file_path = Path(path)
    async with aiofiles.open(file_path, 'rb') as f:
        content = await f.read()
    content_type = mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"
    return file_path.name, content, content_type


class NavigatorApi:
    """Endpoint wrappers over an ApiClient bound to the user token"""

    def __init__(self, client: ApiClient):
        self.client = client

    # ==================== Authentication ====================
    async def signin(self, email: str, password: str) -> Dict[str, Any]:
        return await self.client.post("/auth/signin", json={"email": email, "password": password}, auth=False)

    async def signup(self, data: SignupData) -> Dict[str, Any]:
        return await self.client.post("/auth/signup", json=data.to_payload(), auth=False)

    async def verify_token(self, token: str) -> Dict[str, Any]:
        """Check an arbitrary token without storing it"""
        return await self.client.post("/auth/verify-token", json={"token": token}, auth=False)

    # ==================== Users ====================
    async def get_user_profile(self) -> Dict[str, Any]:
        return await self.client.get("/users/profile")

    async def update_user_profile(self, fields: Union[ProfileUpdate, Dict[str, Any]]) -> Dict[str, Any]:
        payload = fields.to_payload() if isinstance(fields, ProfileUpdate) else dict(fields)
        return await self.client.put("/users/profile", json=payload)

    # ==================== Dashboards ====================
    async def get_indian_dashboard(self) -> Dict[str, Any]:
        return await self.client.get("/dashboard/indian")

    async def get_international_dashboard(self) -> Dict[str, Any]:
        return await self.client.get("/dashboard/international")

    # ==================== Market Intelligence ====================
    async def get_market_intelligence(
        self,
        hs_code: Optional[str] = None,
        countries: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None
    ) -> Dict[str, Any]:
        params = {"hsCode": hs_code, "countries": countries, "page": page, "limit": limit}
        return await self.client.get("/market-intelligence", params=params)

    async def get_market_countries(self) -> Dict[str, Any]:
        return await self.client.get("/market-intelligence/countries")

    async def get_market_hs_codes(self) -> Dict[str, Any]:
        return await self.client.get("/market-intelligence/hs-codes")

    # ==================== Buyers ====================
    async def get_buyers(
        self,
        country: Optional[str] = None,
        product_category: Optional[str] = None,
        certification: Optional[str] = None,
        search: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None
    ) -> Dict[str, Any]:
        params = {
            "country": country,
            "productCategory": product_category,
            "certification": certification,
            "search": search,
            "page": page,
            "limit": limit,
            "sortBy": sort_by,
            "sortOrder": sort_order,
        }
        return await self.client.get("/buyers", params=params)

    async def get_buyer(self, buyer_id: str) -> Dict[str, Any]:
        return await self.client.get(f"/buyers/{buyer_id}")

    async def update_buyer_contact(
        self,
        buyer_id: str,
        status: str,
        notes: Optional[str] = None,
        deal_value: Optional[float] = None
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"status": status}
        if notes is not None:
            payload["notes"] = notes
        if deal_value is not None:
            payload["dealValue"] = deal_value
        return await self.client.post(f"/buyers/{buyer_id}/contact", json=payload)

    async def get_buyer_filter_options(self) -> Dict[str, Any]:
        return await self.client.get("/buyers/filters/options")

    # ==================== Compliance ====================
    async def get_compliance(self) -> Dict[str, Any]:
        return await self.client.get("/compliance")

    async def update_compliance_requirement(
        self,
        requirement: str,
        completed: bool,
        file_url: Optional[str] = None
    ) -> Dict[str, Any]:
        payload = {"requirement": requirement, "completed": completed, "fileUrl": file_url}
        return await self.client.put("/compliance/requirement", json=payload)

    async def get_compliance_vendors(self) -> Dict[str, Any]:
        return await self.client.get("/compliance/vendors")

    # ==================== Relief Schemes ====================
    async def get_relief_schemes(self) -> Dict[str, Any]:
        return await self.client.get("/relief-schemes")

    async def apply_for_relief_scheme(
        self,
        scheme_id: str,
        documents_uploaded: Optional[List[str]] = None
    ) -> Dict[str, Any]:
        return await self.client.post(
            f"/relief-schemes/{scheme_id}/apply",
            json={"documentsUploaded": documents_uploaded or []}
        )

    async def get_relief_applications(self) -> Dict[str, Any]:
        return await self.client.get("/relief-schemes/applications")

    # ==================== Impact ====================
    async def get_impact_dashboard(self) -> Dict[str, Any]:
        return await self.client.get("/impact/dashboard")

    async def log_impact_event(self, event: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.post("/impact/events", json=event)

    async def get_impact_events(self, **params: Any) -> Dict[str, Any]:
        return await self.client.get("/impact/events", params=params)

    # ==================== File Uploads ====================
    @staticmethod
    def _upload_fields(purpose: Optional[str], related_id: Optional[str]) -> Optional[Dict[str, str]]:
        fields = {}
        if purpose:
            fields["purpose"] = purpose
        if related_id:
            fields["relatedId"] = related_id
        return fields or None

    async def upload_file(
        self,
        path: PathLike,
        purpose: Optional[str] = None,
        related_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Upload one file as multipart field 'file'"""
        files = [("file", await read_upload(path))]
        return await self.client.request(
            "/upload/single",
            "POST",
            files=files,
            data=self._upload_fields(purpose, related_id),
        )

    async def upload_files(
        self,
        paths: List[PathLike],
        purpose: Optional[str] = None,
        related_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Upload up to five files as repeated multipart field 'files'"""
        if not paths:
            raise ValueError("No files to upload")
        if len(paths) > MAX_UPLOAD_FILES:
            raise ValueError(f"At most {MAX_UPLOAD_FILES} files can be uploaded at once")

        files = [("files", await read_upload(path)) for path in paths]
        return await self.client.request(
            "/upload/multiple",
            "POST",
            files=files,
            data=self._upload_fields(purpose, related_id),
        )

    async def get_user_files(self, **params: Any) -> Dict[str, Any]:
        return await self.client.get("/upload/files", params=params)

    async def delete_file(self, file_id: str) -> Dict[str, Any]:
        return await self.client.delete(f"/upload/files/{file_id}")
