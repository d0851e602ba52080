"""HTTP front-end that turns block requests into firewall queue notifications."""

from __future__ import annotations

import hmac
import logging
import time
from contextlib import asynccontextmanager

import uvicorn
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import FastAPI, Header, HTTPException, Request, status
from pydantic import BaseModel, Field
from starlette.middleware.base import BaseHTTPMiddleware

from blockip.core.config import Settings
from blockip.ip import build_block_ip_service

settings = Settings()

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)
_request_logger = logging.getLogger("blockip.requests")


class BlockIpRequest(BaseModel):
    ip: str = Field(..., min_length=1, description="Address handed to the firewall as-is")
    permanent: bool = False


class BlockIpResponse(BaseModel):
    status: str = "accepted"
    ip: str
    permanent: bool


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with status code and latency."""

    async def dispatch(self, request: Request, call_next):
        start = time.monotonic()
        try:
            response = await call_next(request)
        except Exception:
            elapsed_ms = (time.monotonic() - start) * 1000
            _request_logger.exception(
                "UNHANDLED_EXCEPTION method=%s path=%s client=%s elapsed_ms=%.1f",
                request.method,
                request.url.path,
                request.client.host if request.client else "unknown",
                elapsed_ms,
            )
            raise

        elapsed_ms = (time.monotonic() - start) * 1000
        if response.status_code >= 500:
            _request_logger.error(
                "SERVER_ERROR status=%d method=%s path=%s elapsed_ms=%.1f",
                response.status_code,
                request.method,
                request.url.path,
                elapsed_ms,
            )
        elif response.status_code >= 400:
            _request_logger.warning(
                "CLIENT_ERROR status=%d method=%s path=%s elapsed_ms=%.1f",
                response.status_code,
                request.method,
                request.url.path,
                elapsed_ms,
            )
        else:
            _request_logger.debug(
                "OK status=%d method=%s path=%s elapsed_ms=%.1f",
                response.status_code,
                request.method,
                request.url.path,
                elapsed_ms,
            )
        return response


def require_control_token(x_block_ip_control_token: str | None) -> None:
    expected = (settings.BLOCK_IP_CONTROL_TOKEN or "").strip()
    if not expected:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Control token is not configured.",
        )
    if not x_block_ip_control_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing control token.")
    if not hmac.compare_digest(x_block_ip_control_token, expected):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid control token.")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings.validate_security()
    app.state.block_ip_service = build_block_ip_service(settings)
    logger.info("Block-IP notifier started with %s", type(app.state.block_ip_service).__name__)

    try:
        yield
    finally:
        await app.state.block_ip_service.close()
        logger.info("Block-IP notifier stopped")


app = FastAPI(title=settings.PROJECT_NAME, version=settings.PROJECT_VERSION, lifespan=lifespan)
app.add_middleware(RequestLoggingMiddleware)


@app.get("/health")
async def health(request: Request) -> dict[str, str]:
    """Lightweight health check for container orchestration."""
    return {"status": "ok", "notifier": type(request.app.state.block_ip_service).__name__}


@app.post("/block-ip", status_code=status.HTTP_202_ACCEPTED, response_model=BlockIpResponse)
async def block_ip(
    payload: BlockIpRequest,
    request: Request,
    x_block_ip_control_token: str | None = Header(default=None),
) -> BlockIpResponse:
    require_control_token(x_block_ip_control_token)

    try:
        await request.app.state.block_ip_service.block_ip(payload.ip, payload.permanent)
    except (ClientError, BotoCoreError):
        logger.exception("Queue publish failed for ip=%s permanent=%s", payload.ip, payload.permanent)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Queue publish failed.")

    return BlockIpResponse(ip=payload.ip, permanent=payload.permanent)


if __name__ == "__main__":
    uvicorn.run("blockip.app.server:app", host="0.0.0.0", port=settings.port, workers=1)
