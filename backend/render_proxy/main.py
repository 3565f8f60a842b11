from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional
import asyncio
import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from render_proxy.config import get_settings
from render_proxy.errors import RenderProxyError, StabilizationTimeout

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logger.info("[startup] Render proxy ready (viewport %dx%d, max depth %d)",
                settings.viewport_width, settings.viewport_height, settings.max_depth)
    yield


app = FastAPI(title="Render Proxy API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RenderProxyError)
async def render_proxy_error_handler(request: Request, exc: RenderProxyError):
    logger.warning("[%s] %s: %s", request.url.path, exc.error, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.error, "message": exc.message},
    )


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

class ViewportOption(BaseModel):
    width: Optional[int] = None
    height: Optional[int] = None


class RenderOptions(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    viewport: Optional[ViewportOption] = None
    screenshot: bool = False
    compress_screenshot: bool = False


class RenderRequest(BaseModel):
    # Missing, null or empty html is rejected with a 400 by the renderer, not a 422 here
    html: Optional[str] = None
    options: RenderOptions = RenderOptions()


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@app.get("/")
def root():
    return {"message": "Render proxy running. Use /api/fetch, /api/proxy or /api/render"}


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/api/render")
async def render_endpoint(request: RenderRequest):
    """Render HTML in headless Chromium and return its pruned layout tree."""
    from render_proxy.renderer import render_html

    settings = get_settings()
    viewport = request.options.viewport.model_dump() if request.options.viewport else None

    try:
        output = await asyncio.wait_for(
            render_html(
                request.html,
                viewport=viewport,
                screenshot=request.options.screenshot,
                compress_screenshot=request.options.compress_screenshot,
            ),
            timeout=settings.render_timeout,
        )
    except asyncio.TimeoutError:
        raise StabilizationTimeout(f"Render exceeded {settings.render_timeout}s")
    except RenderProxyError:
        raise
    except Exception as e:
        logger.exception("[render] Unexpected error")
        raise HTTPException(status_code=500, detail=f"Rendering failed: {str(e)}")

    body = {
        "success": True,
        "data": output.result.to_payload(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if output.screenshot:
        body["screenshot"] = output.screenshot
        body["screenshotType"] = output.screenshot_media_type
    return body


@app.get("/api/fetch")
async def fetch_endpoint(url: Optional[str] = None):
    """Fetch a page's HTML so the caller can post it back to /api/render."""
    from render_proxy.fetcher import fetch_html

    html = await fetch_html(url)
    return {"success": True, "html": html}


@app.api_route("/api/proxy", methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"])
async def proxy_endpoint(request: Request, url: Optional[str] = None):
    """Forward a request to ``url`` and relay the upstream body and content type."""
    from render_proxy.fetcher import proxy_request

    body = None
    if request.method not in ("GET", "HEAD"):
        raw = await request.body()
        if raw:
            try:
                body = await request.json()
            except ValueError:
                body = raw.decode("utf-8", errors="replace")

    upstream = await proxy_request(
        request.method,
        url,
        authorization=request.headers.get("authorization"),
        body=body,
    )
    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type=upstream.content_type,
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)
