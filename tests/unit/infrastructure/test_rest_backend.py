"""
Unit tests for the PostgREST backend client.

Requests are answered by an httpx.MockTransport so the wire format can be
inspected without a server.
"""

import json

import httpx
import pytest

from storefront.infrastructure.backend import RestBackend, default_wilayas
from storefront.infrastructure.storage.exceptions import (
    BackendConfigurationError,
    FetchError,
    OrderWriteError,
)

BASE_URL = "https://shop.example.co/rest/v1"


def make_backend(handler):
    client = httpx.AsyncClient(
        base_url=BASE_URL, transport=httpx.MockTransport(handler)
    )
    return RestBackend("https://shop.example.co", "anon-key", client=client)


class TestConfiguration:
    def test_missing_url(self):
        with pytest.raises(BackendConfigurationError) as exc_info:
            RestBackend("", "anon-key")
        assert exc_info.value.details["config_key"] == "BACKEND_URL"

    def test_missing_key(self):
        with pytest.raises(BackendConfigurationError) as exc_info:
            RestBackend("https://shop.example.co", None)
        assert exc_info.value.details["config_key"] == "BACKEND_API_KEY"

    @pytest.mark.asyncio
    async def test_default_client_sends_api_key(self):
        backend = RestBackend("https://shop.example.co/", "anon-key")

        assert str(backend._client.base_url) == f"{BASE_URL}/"
        assert backend._client.headers["apikey"] == "anon-key"
        assert backend._client.headers["Authorization"] == "Bearer anon-key"
        await backend.close()


class TestReads:
    @pytest.mark.asyncio
    async def test_select_wire_format(self):
        seen = {}

        def handler(request):
            seen["url"] = request.url
            return httpx.Response(200, json=[{"id": 1}])

        backend = make_backend(handler)
        rows = await backend.select(
            "categories", order="display_order.asc", filters={"is_active": "eq.true"}
        )

        assert rows == [{"id": 1}]
        assert seen["url"].path == "/rest/v1/categories"
        assert seen["url"].params["select"] == "*"
        assert seen["url"].params["order"] == "display_order.asc"
        assert seen["url"].params["is_active"] == "eq.true"

    @pytest.mark.asyncio
    async def test_select_single_asks_for_object(self):
        seen = {}

        def handler(request):
            seen["accept"] = request.headers["Accept"]
            return httpx.Response(200, json={"site_name": "Boutique"})

        backend = make_backend(handler)

        assert await backend.select_single("site_settings") == {"site_name": "Boutique"}
        assert seen["accept"] == "application/vnd.pgrst.object+json"

    @pytest.mark.asyncio
    async def test_http_error_becomes_fetch_error(self):
        backend = make_backend(lambda request: httpx.Response(503, text="unavailable"))

        with pytest.raises(FetchError) as exc_info:
            await backend.select("products")

        assert exc_info.value.resource == "products"
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_transport_error_becomes_fetch_error(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        backend = make_backend(handler)

        with pytest.raises(FetchError) as exc_info:
            await backend.select("wilayas")
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_non_list_payload_is_rejected(self):
        backend = make_backend(lambda request: httpx.Response(200, json={"oops": True}))

        with pytest.raises(FetchError):
            await backend.select("products")

    @pytest.mark.asyncio
    async def test_invalid_json_is_rejected(self):
        backend = make_backend(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(FetchError):
            await backend.select("products")


class TestInsert:
    @pytest.mark.asyncio
    async def test_insert_returns_representation(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["prefer"] = request.headers["Prefer"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json=[{"id": "ord-1"}])

        backend = make_backend(handler)
        rows = await backend.insert("orders", [{"customer_phone": "0550"}])

        assert rows == [{"id": "ord-1"}]
        assert seen["method"] == "POST"
        assert seen["prefer"] == "return=representation"
        assert seen["body"] == [{"customer_phone": "0550"}]

    @pytest.mark.asyncio
    async def test_rejected_insert(self):
        backend = make_backend(
            lambda request: httpx.Response(400, text='{"message":"null value"}')
        )

        with pytest.raises(OrderWriteError) as exc_info:
            await backend.insert("order_items", [{"order_id": "1"}])

        assert exc_info.value.details["status_code"] == 400
        assert "null value" in exc_info.value.details["body"]

    @pytest.mark.asyncio
    async def test_transport_failure(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        backend = make_backend(handler)

        with pytest.raises(OrderWriteError):
            await backend.insert("orders", [{}])


def test_default_wilayas():
    wilayas = default_wilayas()

    assert len(wilayas) == 58
    assert [w.id for w in wilayas] == [str(i) for i in range(1, 59)]
    alger = wilayas[15]
    assert (alger.name, alger.delivery_home, alger.delivery_post) == ("Alger", 400, 250)
    assert default_wilayas() is not wilayas
