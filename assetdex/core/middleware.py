"""
FastAPI middleware for logging API requests and responses.
"""
import time
import uuid
from typing import Any, Callable, Dict, Optional

import jwt
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from assetdex.core.config import settings
from assetdex.core.logger import app_logger, clear_request_context, set_request_context

REQUEST_ID_HEADER = "X-Request-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs every API request/response pair as structured records.

    A request id is taken from the incoming X-Request-ID header when the
    frontend supplies one (so a debounced availability check can be traced
    end to end), otherwise a new uuid4 is generated. The id is echoed back in
    the response headers.
    """

    SENSITIVE_HEADERS = {
        "authorization",
        "cookie",
        "apikey",
        "x-api-key",
        "x-auth-token",
    }

    EXCLUDED_PATHS = {
        "/",
        "/health",
        "/docs",
        "/redoc",
        "/openapi.json",
    }

    MAX_BODY_LOG_BYTES = 10_000

    # Availability checks back an interactive form; anything slower is worth a warning
    SLOW_REQUEST_MS = 500

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        path = request.url.path
        set_request_context(request_id=request_id, method=request.method, path=path)

        start_time = time.perf_counter()
        is_excluded = path in self.EXCLUDED_PATHS

        if not is_excluded:
            await self._log_request(request, request_id)

        response: Optional[Response] = None
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        except Exception as exc:
            app_logger.exception(
                "Request failed with exception",
                extra={
                    "request_id": request_id,
                    "exception_type": type(exc).__name__,
                },
            )
            raise
        finally:
            process_time = (time.perf_counter() - start_time) * 1000
            if not is_excluded and response is not None:
                self._log_response(request, response, request_id, process_time)
            clear_request_context()

    async def _log_request(self, request: Request, request_id: str) -> None:
        client_ip = request.client.host if request.client else "unknown"
        request_body = await self._extract_body(request) if self._should_log_body(request) else None

        user_context = self._extract_user_from_jwt(request)
        if user_context and "user_id" in user_context:
            request.state.user_id = user_context["user_id"]

        log_func = app_logger.debug if settings.ENVIRONMENT in ("dev", "uat") else app_logger.info
        log_func(
            "API Request",
            extra={
                "request_id": request_id,
                "query_params": dict(request.query_params) or None,
                "headers": self._sanitize_headers(dict(request.headers)),
                "client_ip": client_ip,
                "body": request_body,
                "user": user_context,
            },
        )

    def _log_response(
        self,
        request: Request,
        response: Response,
        request_id: str,
        process_time_ms: float,
    ) -> None:
        status_code = response.status_code
        is_slow = process_time_ms >= self.SLOW_REQUEST_MS
        if status_code >= 500:
            log_func = app_logger.error
        elif status_code >= 400 or is_slow:
            log_func = app_logger.warning
        else:
            log_func = app_logger.debug if settings.ENVIRONMENT in ("dev", "uat") else app_logger.info

        log_func(
            "API Response",
            extra={
                "request_id": request_id,
                "route": self._route_template(request),
                "status_code": status_code,
                "process_time_ms": round(process_time_ms, 2),
                "slow": is_slow or None,
            },
        )

    @staticmethod
    def _route_template(request: Request) -> Optional[str]:
        """Matched path template, e.g. /api/dcim/racks/{rack_name}/occupancy."""
        route = request.scope.get("route")
        return getattr(route, "path", None)

    async def _extract_body(self, request: Request) -> Optional[str]:
        body_bytes = await request.body()
        if not body_bytes:
            return None

        if len(body_bytes) > self.MAX_BODY_LOG_BYTES:
            return f"<body too large: {len(body_bytes)} bytes>"

        async def receive() -> Dict[str, Any]:
            return {"type": "http.request", "body": body_bytes, "more_body": False}

        # Replay the consumed body for the downstream handler.
        request._receive = receive  # type: ignore[attr-defined]
        return body_bytes.decode("utf-8", errors="replace")

    def _should_log_body(self, request: Request) -> bool:
        if request.method not in ("POST", "PUT", "PATCH"):
            return False
        return "application/json" in request.headers.get("content-type", "")

    def _sanitize_headers(self, headers: Dict[str, Any]) -> Dict[str, Any]:
        return {
            key: "<redacted>" if key.lower() in self.SENSITIVE_HEADERS else value
            for key, value in headers.items()
        }

    def _extract_user_from_jwt(self, request: Request) -> Optional[Dict[str, Any]]:
        """
        Soft-decode the bearer token for log context only.

        Never raises: authorization is enforced by the route dependencies.
        """
        scheme, _, token = request.headers.get("authorization", "").partition(" ")
        if scheme.lower() != "bearer" or not token:
            return None

        try:
            payload = jwt.decode(
                token,
                settings.JWT_SECRET_KEY,
                algorithms=[settings.JWT_ALGORITHM],
            )
        except jwt.ExpiredSignatureError:
            return {"error": "expired"}
        except jwt.InvalidTokenError:
            return {"error": "invalid"}

        return {
            "user_id": payload.get("sub"),
            "username": payload.get("username"),
            "roles": payload.get("roles"),
        }
