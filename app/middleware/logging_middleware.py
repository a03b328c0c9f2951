import logging
import time
import uuid
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from app.config import settings
from app.core.logging_utils import mask_headers, sanitize_log_message

logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Assign a request ID to every request and log requests/responses with masked headers."""

    # Paths that are not logged (reduce noise)
    SKIP_PATHS = {"/health", "/", "/favicon.ico"}
    SKIP_PREFIXES = (f"{settings.API_V1_STR}/docs", f"{settings.API_V1_STR}/redoc", f"{settings.API_V1_STR}/openapi.json")

    async def dispatch(self, request: Request, call_next):
        # Honour a request ID set by a proxy, otherwise generate one
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        path = request.url.path
        if path in self.SKIP_PATHS or path.startswith(self.SKIP_PREFIXES):
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response

        start_time = time.time()
        method = request.method
        client_ip = request.client.host if request.client else None

        logger.debug(
            sanitize_log_message(
                f"Request: {method} {path}",
                RequestID=request_id,
                IP=client_ip,
                UserAgent=request.headers.get("user-agent"),
                QueryParams=dict(request.query_params),
                Headers=mask_headers(dict(request.headers))
            )
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                sanitize_log_message(
                    f"Exception in request: {method} {path}",
                    RequestID=request_id,
                    ProcessTime=f"{time.time() - start_time:.3f}s",
                    IP=client_ip,
                    Error=str(e)
                )
            )
            raise

        response.headers["X-Request-ID"] = request_id

        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            sanitize_log_message(
                f"Response: {method} {path}",
                RequestID=request_id,
                Status=response.status_code,
                ProcessTime=f"{time.time() - start_time:.3f}s",
                IP=client_ip
            )
        )
        return response
