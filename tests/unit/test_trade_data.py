"""
Unit Tests for trade data administration
Tests for: admin token requirement, CSV upload, public analytics
"""
import pytest

from market_navigator.exceptions import AdminAuthRequiredError, ApiError


@pytest.fixture
def admin(navigator, backend, storage):
    storage.set_item("adminToken", backend.issue_admin_token("ops"))
    return navigator


@pytest.fixture
def exports_csv(tmp_path):
    path = tmp_path / "exports.csv"
    path.write_text("year,partner,sector,value\n2023,USA,Seafood,1200\n")
    return path


class TestAdminOnly:
    """Test operations that need the admin token"""

    @pytest.mark.asyncio
    async def test_summary_without_admin_token(self, navigator, backend, storage):
        """Test no request goes out without an admin session"""
        storage.set_item("token", "user-token")

        with pytest.raises(AdminAuthRequiredError):
            await navigator.trade_data.get_summary()

        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_summary_uses_admin_token(self, admin, backend, storage):
        """Test the admin token, never the user token, is sent"""
        storage.set_item("token", "user-token")

        result = await admin.trade_data.get_summary()

        assert result["data"]["sectors"] == ["Seafood", "Textile"]
        header = backend.calls("GET", "/trade-data/summary")[0].headers["Authorization"]
        assert header == f"Bearer {storage.get_item('adminToken')}"

    @pytest.mark.asyncio
    async def test_upload_csv(self, admin, backend, exports_csv):
        """Test the CSV goes out as multipart field csvFile"""
        result = await admin.trade_data.upload_csv(exports_csv)

        assert result["message"] == "Successfully uploaded 3 trade records"
        content = backend.calls("POST", "/trade-data/upload")[0].content
        assert b'name="csvFile"; filename="exports.csv"' in content
        assert b"Content-Type: text/csv" in content

    @pytest.mark.asyncio
    async def test_upload_rejects_non_csv(self, admin, backend, tmp_path):
        """Test only .csv files are accepted"""
        path = tmp_path / "exports.xlsx"
        path.write_bytes(b"PK")

        with pytest.raises(ValueError):
            await admin.trade_data.upload_csv(path)

        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_clear(self, admin, backend, exports_csv):
        """Test clearing reports the deleted count"""
        await admin.trade_data.upload_csv(exports_csv)

        result = await admin.trade_data.clear()

        assert result["message"] == "Cleared 3 trade data records"
        assert backend.calls("DELETE", "/trade-data/clear")

    @pytest.mark.asyncio
    async def test_rejected_admin_token(self, navigator, storage):
        """Test the backend's refusal is surfaced"""
        storage.set_item("adminToken", "forged")

        with pytest.raises(ApiError) as exc_info:
            await navigator.trade_data.get_summary()

        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Access denied. Admin token required."


class TestPublicReads:
    """Test analytics and filtered data"""

    @pytest.mark.asyncio
    async def test_analytics_is_anonymous(self, admin, backend):
        """Test no token is attached to public reads"""
        await admin.trade_data.get_analytics(sector="Seafood")

        request = backend.calls("GET", "/trade-data/analytics")[0]
        assert "Authorization" not in request.headers
        assert request.url.params["sector"] == "Seafood"

    @pytest.mark.asyncio
    async def test_filtered_params(self, navigator, backend):
        """Test year range parameter names"""
        result = await navigator.trade_data.get_filtered(sector="Textile", start_year=2020, end_year=2023)

        assert result["count"] == 0
        params = backend.calls("GET", "/trade-data/filtered")[0].url.params
        assert params["startYear"] == "2020"
        assert params["endYear"] == "2023"
        assert "year" not in params
