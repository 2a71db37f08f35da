"""Tests for API endpoints."""

import asyncio
import gzip

import pytest
from httpx import AsyncClient, ASGITransport

from web_app import create_app
from web_app.middleware.auth import AUTH_COOKIE_NAME, build_token, get_user_id
from config import Config
from shortener.service import URLShortenerService
from shortener.errors import BackendError


@pytest.fixture
def config():
    return Config(
        base_url="http://testserver",
        file_storage_path="",
        secret_key="test-secret",
        trusted_subnet="10.0.0.0/8",
    )


@pytest.fixture
async def app(memory_storage, short_code_generator, logger, config):
    """Create test FastAPI app."""
    service = URLShortenerService(
        storage=memory_storage,
        base_url=config.base_url,
        short_code_generator=short_code_generator,
        logger=logger,
    )
    
    return create_app(
        storage_instance=memory_storage,
        service_instance=service,
        config=config,
    )


@pytest.fixture
async def client(app):
    """Create test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


async def wait_for_status(client, path, expected, attempts=50):
    """Poll until a path answers with the expected status."""
    response = None
    for _ in range(attempts):
        response = await client.get(path)
        if response.status_code == expected:
            return response
        await asyncio.sleep(0.01)
    return response


@pytest.mark.asyncio
class TestShortenEndpoints:
    """Test shortening endpoints."""
    
    async def test_shorten_text(self, client):
        """Test POST / with a plain-text body."""
        response = await client.post("/", content="https://example.com")
        
        assert response.status_code == 201
        assert response.headers["content-type"].startswith("text/plain")
        short_url = response.text
        assert short_url.startswith("http://testserver/")
        assert len(short_url.rsplit("/", 1)[-1]) == 8
    
    async def test_shorten_text_empty(self, client):
        """Test POST / with an empty body."""
        response = await client.post("/", content="   ")
        
        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"
    
    async def test_shorten_json(self, client, sample_urls):
        """Test POST /api/shorten."""
        response = await client.post("/api/shorten", json={"url": sample_urls[0]})
        
        assert response.status_code == 201
        result = response.json()["result"]
        assert result.startswith("http://testserver/")
    
    async def test_shorten_json_is_idempotent(self, client):
        """Test the same URL yields the same short URL over both endpoints."""
        first = await client.post("/api/shorten", json={"url": "https://example.com"})
        second = await client.post("/", content="https://example.com")
        
        assert first.json()["result"] == second.text
    
    async def test_shorten_json_invalid(self, client):
        """Test malformed and empty JSON requests."""
        assert (await client.post("/api/shorten", json={"url": ""})).status_code == 400
        assert (await client.post("/api/shorten", json={"link": "x"})).status_code == 400
        assert (await client.post("/api/shorten", content="not json")).status_code == 400
    
    async def test_shorten_batch(self, client):
        """Test POST /api/shorten/batch keeps correlation ids in order."""
        response = await client.post("/api/shorten/batch", json=[
            {"correlation_id": "1", "original_url": "https://a.example"},
            {"correlation_id": "2", "original_url": "https://b.example"},
        ])
        
        assert response.status_code == 201
        data = response.json()
        assert [item["correlation_id"] for item in data] == ["1", "2"]
        assert data[0]["short_url"] != data[1]["short_url"]
    
    async def test_shorten_batch_invalid(self, client):
        """Test empty batches and empty URLs are rejected."""
        assert (await client.post("/api/shorten/batch", json=[])).status_code == 400
        
        response = await client.post("/api/shorten/batch", json=[
            {"correlation_id": "1", "original_url": "https://a.example"},
            {"correlation_id": "2", "original_url": ""},
        ])
        assert response.status_code == 400
        
        stats = await client.get("/api/internal/stats", headers={"X-Real-IP": "10.0.0.1"})
        assert stats.json()["urls"] == 0


@pytest.mark.asyncio
class TestRedirect:
    """Test short URL resolution."""
    
    async def test_redirect(self, client):
        """Test GET /{short_code} redirects to the original URL."""
        short_url = (await client.post("/", content="https://example.com/page")).text
        code = short_url.rsplit("/", 1)[-1]
        
        response = await client.get(f"/{code}")
        
        assert response.status_code == 307
        assert response.headers["location"] == "https://example.com/page"
    
    async def test_redirect_not_found(self, client):
        """Test unknown and malformed codes."""
        assert (await client.get("/AAAAAAAA")).status_code == 404
        assert (await client.get("/bad=code")).status_code == 404
    
    async def test_redirect_gone(self, client):
        """Test deleted codes answer 410."""
        short_url = (await client.post("/api/shorten", json={"url": "https://example.com/x"})).json()["result"]
        code = short_url.rsplit("/", 1)[-1]
        
        response = await client.request("DELETE", "/api/user/urls", json=[code])
        assert response.status_code == 202
        
        response = await wait_for_status(client, f"/{code}", 410)
        assert response.status_code == 410
        assert response.json()["error"] == "GoneError"


@pytest.mark.asyncio
class TestUserEndpoints:
    """Test cookie identity and per-user endpoints."""
    
    async def test_cookie_issued(self, client, config):
        """Test a fresh identity cookie is issued on first contact."""
        response = await client.post("/", content="https://example.com")
        
        token = response.cookies.get(AUTH_COOKIE_NAME)
        assert token
        assert get_user_id(token, config.secret_key)
    
    async def test_list_requires_cookie(self, client):
        """Test listing without a valid cookie is unauthorized."""
        response = await client.get("/api/user/urls")
        
        assert response.status_code == 401
    
    async def test_list_rejects_forged_cookie(self, client):
        """Test a cookie signed with another key is not trusted."""
        forged = build_token("alice", "wrong-key")
        
        response = await client.get("/api/user/urls", headers={"Cookie": f"{AUTH_COOKIE_NAME}={forged}"})
        
        assert response.status_code == 401
    
    async def test_valid_cookie_honored(self, client, config):
        """Test a cookie signed with the server key keeps its identity."""
        token = build_token("alice", config.secret_key)
        
        response = await client.get("/api/user/urls", headers={"Cookie": f"{AUTH_COOKIE_NAME}={token}"})
        
        assert response.status_code == 204
        assert AUTH_COOKIE_NAME not in response.cookies
    
    async def test_list_empty(self, client):
        """Test a known user with no URLs gets 204."""
        await client.get("/ping")
        
        response = await client.get("/api/user/urls")
        
        assert response.status_code == 204
    
    async def test_list_user_urls(self, app, client, sample_urls):
        """Test the caller sees their URLs and nobody else's."""
        for url in sample_urls:
            await client.post("/api/shorten", json={"url": url})
        
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as other:
            await other.post("/", content="https://other.example")
        
        response = await client.get("/api/user/urls")
        
        assert response.status_code == 200
        data = response.json()
        assert sorted(item["original_url"] for item in data) == sorted(sample_urls)
        assert all(item["short_url"].startswith("http://testserver/") for item in data)
        assert not any(item["is_deleted"] for item in data)
    
    async def test_delete_foreign_codes_ignored(self, app, client):
        """Test deleting someone else's code has no effect."""
        short_url = (await client.post("/", content="https://example.com/mine")).text
        code = short_url.rsplit("/", 1)[-1]
        
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as other:
            response = await other.request("DELETE", "/api/user/urls", json=[code])
            assert response.status_code == 202
        
        await asyncio.sleep(0.05)
        assert (await client.get(f"/{code}")).status_code == 307
    
    async def test_delete_marks_listing(self, client):
        """Test deleted URLs stay listed with the deleted flag."""
        short_url = (await client.post("/", content="https://example.com/del")).text
        code = short_url.rsplit("/", 1)[-1]
        
        await client.request("DELETE", "/api/user/urls", json=[code])
        await wait_for_status(client, f"/{code}", 410)
        
        data = (await client.get("/api/user/urls")).json()
        assert data == [{"short_url": short_url, "original_url": "https://example.com/del", "is_deleted": True}]


@pytest.mark.asyncio
class TestServiceEndpoints:
    """Test ping, stats and compression."""
    
    async def test_ping(self, client):
        """Test ping succeeds with a healthy backend."""
        assert (await client.get("/ping")).status_code == 200
    
    async def test_ping_backend_down(self, client, memory_storage):
        """Test ping reports backend failure as 500."""
        async def broken_ping():
            raise BackendError("database unreachable")
        
        memory_storage.ping = broken_ping
        
        response = await client.get("/ping")
        
        assert response.status_code == 500
        assert response.json()["error"] == "BackendError"
    
    async def test_stats_trusted(self, client):
        """Test stats for a caller inside the trusted subnet."""
        await client.post("/", content="https://a.example")
        await client.post("/", content="https://b.example")
        
        response = await client.get("/api/internal/stats", headers={"X-Real-IP": "10.20.30.40"})
        
        assert response.status_code == 200
        assert response.json() == {"urls": 2, "users": 1}
    
    @pytest.mark.parametrize("headers", [{}, {"X-Real-IP": "192.168.1.1"}, {"X-Real-IP": "garbage"}])
    async def test_stats_untrusted(self, client, headers):
        """Test stats are forbidden outside the trusted subnet."""
        response = await client.get("/api/internal/stats", headers=headers)
        
        assert response.status_code == 403
    
    async def test_gzip_request(self, client):
        """Test gzip-compressed request bodies are accepted."""
        response = await client.post(
            "/api/shorten",
            content=gzip.compress(b'{"url": "https://gzip.example"}'),
            headers={"Content-Encoding": "gzip", "Content-Type": "application/json"},
        )
        
        assert response.status_code == 201
        assert response.json()["result"].startswith("http://testserver/")
    
    async def test_malformed_gzip_request(self, client):
        """Test a body that is not gzip is rejected."""
        response = await client.post(
            "/",
            content=b"definitely not gzip",
            headers={"Content-Encoding": "gzip"},
        )
        
        assert response.status_code == 400
    
    async def test_gzip_response(self, client):
        """Test large responses are compressed."""
        for i in range(20):
            await client.post("/", content=f"https://example.com/some/long/path/{i}")
        
        response = await client.get("/api/user/urls", headers={"Accept-Encoding": "gzip"})
        
        assert response.status_code == 200
        assert response.headers["content-encoding"] == "gzip"
        assert len(response.json()) == 20
