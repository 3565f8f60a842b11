"""Error taxonomy for the render harness.

The extraction core raises none of these itself; the harness wraps whatever
escapes the walk and the API layer maps each class onto an HTTP status.
"""


class RenderProxyError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500
    error = "Internal Server Error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputError(RenderProxyError):
    """Request is missing its HTML or URL, or the URL is malformed."""

    status_code = 400
    error = "Bad Request"


class StabilizationTimeout(RenderProxyError):
    """Document did not settle within the page load timeout."""

    status_code = 504
    error = "Render timed out"


class ResourceError(RenderProxyError):
    """Could not obtain a browser or page to render into."""

    status_code = 503
    error = "Browser unavailable"


class ExtractionRuntimeError(RenderProxyError):
    """Reading the rendered document failed mid-walk."""

    status_code = 500
    error = "Rendering failed"


class UpstreamError(RenderProxyError):
    """A fetched or proxied URL answered with an error, or could not be reached."""

    error = "Proxy request failed"

    def __init__(self, message: str, status_code: int = 502, error: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        if error:
            self.error = error
