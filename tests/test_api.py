from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from render_proxy.errors import ExtractionRuntimeError, InputError, StabilizationTimeout, UpstreamError
from render_proxy.fetcher import ProxiedResponse
from render_proxy.layout_models import Bounds, LayoutNode, LayoutResult, Viewport
from render_proxy.main import app
from render_proxy.renderer import RenderOutput

client = TestClient(app)

RESULT = LayoutResult(
    elements=LayoutNode(
        tag="body",
        bounds=Bounds(x=0, y=0, width=1280, height=64),
        children=(LayoutNode(tag="p", text="Hello", bounds=Bounds(x=20, y=20, width=200, height=24)),),
    ),
    viewport=Viewport(width=1280, height=800),
    total_elements=4,
)


def test_root_and_health():
    assert "Render proxy running" in client.get("/").json()["message"]
    assert client.get("/health").json() == {"status": "ok"}


def test_cors_headers():
    response = client.options("/api/render", headers={
        "Origin": "https://www.figma.com",
        "Access-Control-Request-Method": "POST",
    })
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] in ("*", "https://www.figma.com")


def test_render_success():
    render = AsyncMock(return_value=RenderOutput(result=RESULT))
    with patch("render_proxy.renderer.render_html", render):
        response = client.post("/api/render", json={
            "html": "<p>Hello</p>",
            "options": {"viewport": {"width": 1280, "height": 800}, "compressScreenshot": True},
        })

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert "timestamp" in body
    assert "screenshot" not in body
    data = body["data"]
    assert data["viewport"] == {"width": 1280, "height": 800}
    assert data["totalElements"] == 4
    assert data["elements"]["children"][0]["text"] == "Hello"
    assert data["elements"]["children"][0]["style"]["fontSize"] == 14

    kwargs = render.await_args.kwargs
    assert kwargs["viewport"] == {"width": 1280, "height": 800}
    assert kwargs["compress_screenshot"] is True
    assert kwargs["screenshot"] is False


def test_render_with_screenshot():
    output = RenderOutput(result=RESULT, screenshot="aGVsbG8=", screenshot_media_type="image/png")
    with patch("render_proxy.renderer.render_html", AsyncMock(return_value=output)):
        body = client.post("/api/render", json={"html": "<p>x</p>", "options": {"screenshot": True}}).json()
    assert body["screenshot"] == "aGVsbG8="
    assert body["screenshotType"] == "image/png"


def test_render_null_elements():
    empty = LayoutResult(elements=None, viewport=Viewport(width=1280, height=800))
    with patch("render_proxy.renderer.render_html", AsyncMock(return_value=RenderOutput(result=empty))):
        data = client.post("/api/render", json={"html": "<div><div></div></div>"}).json()["data"]
    assert data == {"elements": None, "viewport": {"width": 1280, "height": 800}}


def test_render_missing_html_is_400():
    response = client.post("/api/render", json={})
    assert response.status_code == 400
    assert response.json()["message"] == 'Missing "html" in request body'


@pytest.mark.parametrize("error, status", [
    (InputError("bad"), 400),
    (StabilizationTimeout("slow"), 504),
    (ExtractionRuntimeError("detached"), 500),
])
def test_render_errors_map_to_status(error, status):
    with patch("render_proxy.renderer.render_html", AsyncMock(side_effect=error)):
        response = client.post("/api/render", json={"html": "<p>x</p>"})
    assert response.status_code == status
    assert response.json() == {"error": error.error, "message": error.message}


def test_render_unexpected_error_is_500():
    with patch("render_proxy.renderer.render_html", AsyncMock(side_effect=RuntimeError("boom"))):
        response = client.post("/api/render", json={"html": "<p>x</p>"})
    assert response.status_code == 500
    assert "boom" in response.json()["detail"]


def test_render_method_not_allowed():
    assert client.get("/api/render").status_code == 405


def test_fetch_endpoint():
    with patch("render_proxy.fetcher.fetch_html", AsyncMock(return_value="<p>remote</p>")) as fetch:
        response = client.get("/api/fetch", params={"url": "https://example.com"})
    assert response.json() == {"success": True, "html": "<p>remote</p>"}
    fetch.assert_awaited_once_with("https://example.com")


def test_fetch_missing_url_is_400():
    response = client.get("/api/fetch")
    assert response.status_code == 400
    assert response.json()["message"] == "Missing required parameter: url"


def test_proxy_relays_content_type():
    upstream = ProxiedResponse(status_code=200, content_type="text/html; charset=utf-8", content=b"<p>hi</p>")
    with patch("render_proxy.fetcher.proxy_request", AsyncMock(return_value=upstream)) as proxy:
        response = client.get("/api/proxy", params={"url": "https://example.com"},
                               headers={"Authorization": "Bearer t"})
    assert response.status_code == 200
    assert response.text == "<p>hi</p>"
    assert response.headers["content-type"].startswith("text/html")
    args, kwargs = proxy.await_args
    assert args == ("GET", "https://example.com")
    assert kwargs["authorization"] == "Bearer t"
    assert kwargs["body"] is None


def test_proxy_forwards_json_body():
    upstream = ProxiedResponse(status_code=200, content_type="application/json", content=b'{"ok": true}')
    with patch("render_proxy.fetcher.proxy_request", AsyncMock(return_value=upstream)) as proxy:
        response = client.post("/api/proxy", params={"url": "https://api.example.com"}, json={"a": 1})
    assert response.json() == {"ok": True}
    assert proxy.await_args.kwargs["body"] == {"a": 1}


def test_proxy_upstream_error():
    error = UpstreamError("Not Found", status_code=404, error="HTTP 404")
    with patch("render_proxy.fetcher.proxy_request", AsyncMock(side_effect=error)):
        response = client.get("/api/proxy", params={"url": "https://example.com/x"})
    assert response.status_code == 404
    assert response.json() == {"error": "HTTP 404", "message": "Not Found"}


def test_render_null_html_is_400():
    response = client.post("/api/render", json={"html": None})
    assert response.status_code == 400
    assert response.json()["message"] == 'Missing "html" in request body'


def test_proxy_forwards_patch_body():
    upstream = ProxiedResponse(status_code=200, content_type="application/json", content=b'{"ok":true}')
    with patch("render_proxy.fetcher.proxy_request", AsyncMock(return_value=upstream)) as proxy:
        response = client.patch("/api/proxy", params={"url": "https://api.example.com/files/1"},
                                json={"name": "Frame"})
    assert response.status_code == 200
    assert proxy.await_args.args[0] == "PATCH"
    assert proxy.await_args.kwargs["body"] == {"name": "Frame"}


def test_proxy_forwards_head_without_body():
    upstream = ProxiedResponse(status_code=200, content_type="image/png", content=b"")
    with patch("render_proxy.fetcher.proxy_request", AsyncMock(return_value=upstream)) as proxy:
        response = client.head("/api/proxy", params={"url": "https://example.com/logo.png"})
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert proxy.await_args.args[0] == "HEAD"
    assert proxy.await_args.kwargs["body"] is None
