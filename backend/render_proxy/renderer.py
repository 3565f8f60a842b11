"""
Headless render harness.

Wraps caller HTML in the normalization template, loads it into a fresh
Chromium page, waits for it to settle, snapshots the document and hands it
to the extractor. Every request gets its own browser so extractions never
share a document; the browser is closed on every exit path.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from playwright.async_api import (
    async_playwright,
    Route,
    Error as PlaywrightError,
    TimeoutError as PlaywrightTimeoutError,
)

from render_proxy.config import get_settings
from render_proxy.dom_snapshot import capture_document
from render_proxy.errors import (
    InputError,
    StabilizationTimeout,
    ResourceError,
    ExtractionRuntimeError,
)
from render_proxy.extractor import ExtractionConfig, extract_layout
from render_proxy.image_utils import encode_screenshot
from render_proxy.layout_models import LayoutResult

logger = logging.getLogger(__name__)

TEMPLATE = """<!DOCTYPE html>
<html>
  <head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <style>
      * {{
        box-sizing: border-box !important;
        -webkit-font-smoothing: antialiased !important;
        -moz-osx-font-smoothing: grayscale !important;
      }}
      body {{
        margin: 0 !important;
        padding: 20px !important;
        font-family: system-ui, -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif !important;
        line-height: 1.5 !important;
      }}
      script, noscript {{ display: none !important; }}
    </style>
  </head>
  <body>
    {html}
  </body>
</html>
"""


@dataclass
class RenderOutput:
    result: LayoutResult
    screenshot: Optional[str] = None
    screenshot_media_type: Optional[str] = None


def wrap_html(html: str) -> str:
    """Place caller HTML inside the normalization template."""
    return TEMPLATE.format(html=html)


def resolve_viewport(viewport: Optional[dict] = None) -> dict:
    settings = get_settings()
    viewport = viewport or {}
    return {
        "width": viewport.get("width") or settings.viewport_width,
        "height": viewport.get("height") or settings.viewport_height,
    }


async def render_html(
    html: str,
    viewport: Optional[dict] = None,
    screenshot: bool = False,
    compress_screenshot: bool = False,
) -> RenderOutput:
    """
    Render ``html`` and extract its layout tree.

    Raises InputError, ResourceError, StabilizationTimeout or
    ExtractionRuntimeError; nothing is retried.
    """
    if not html or not html.strip():
        raise InputError('Missing "html" in request body')

    settings = get_settings()
    config = ExtractionConfig.from_settings(settings)
    size = resolve_viewport(viewport)
    blocked = set(settings.blocked_resource_types)

    async def handle_route(route: Route):
        """Abort blocked resource types, let everything else through."""
        if route.request.resource_type in blocked:
            await route.abort()
        else:
            await route.continue_()

    async with async_playwright() as p:
        try:
            browser = await p.chromium.launch(headless=True)
        except PlaywrightError as e:
            raise ResourceError(f"Failed to launch browser: {e}") from e

        try:
            try:
                context = await browser.new_context(
                    viewport=size,
                    device_scale_factor=1,
                    ignore_https_errors=True,
                    java_script_enabled=settings.java_script_enabled,
                )
                page = await context.new_page()
                if blocked:
                    await page.route("**/*", handle_route)
            except PlaywrightError as e:
                raise ResourceError(f"Failed to open page: {e}") from e

            logger.info("[render] Setting content (%d chars, viewport %dx%d)",
                        len(html), size["width"], size["height"])
            try:
                await page.set_content(
                    wrap_html(html),
                    wait_until="networkidle",
                    timeout=settings.page_load_timeout,
                )
            except PlaywrightTimeoutError as e:
                raise StabilizationTimeout(
                    f"Content did not settle within {settings.page_load_timeout}ms"
                ) from e
            except PlaywrightError as e:
                raise ResourceError(f"Failed to load content: {e}") from e

            # Fonts and images
            await page.wait_for_timeout(settings.settle_delay)

            try:
                document = await capture_document(page, config.max_depth, config.text_max)
                result = extract_layout(document, config)
            except Exception as e:
                raise ExtractionRuntimeError(f"Extraction failed: {e}") from e

            output = RenderOutput(result=result)

            if screenshot:
                try:
                    png = await page.screenshot(type="png", full_page=True, omit_background=False)
                    output.screenshot, output.screenshot_media_type = encode_screenshot(
                        png, jpeg_width=size["width"] if compress_screenshot else None,
                    )
                except (PlaywrightError, OSError) as e:
                    logger.warning("[render] Screenshot failed: %s", e)

            logger.info("[render] Extracted layout (%s elements in document)",
                        result.total_elements)
            return output
        finally:
            await browser.close()
