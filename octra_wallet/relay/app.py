from __future__ import annotations

"""
HTTP passthrough relay.

Browsers (or any client that cannot reach the endpoint directly) call
``/api/proxy?path=<endpoint>`` and the relay forwards the request to
``{upstream}/{endpoint}``:

- the method is kept (GET, POST, PUT, PATCH, DELETE);
- incoming headers are forwarded minus ``host`` and hop-by-hop headers;
- a JSON request body is re-serialized, anything else is passed through;
- the upstream status is mirrored; JSON bodies (by content type) are
  re-serialized, others relayed as text.

Run with ``octra-wallet relay`` or
``uvicorn --factory octra_wallet.relay.app:create_app``.
"""

import json
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

import httpx
from fastapi import APIRouter, FastAPI, Query, Request
from fastapi.responses import JSONResponse, Response

from ..config import RelaySettings, get_relay_settings
from ..logging import setup_logging
from ..version import __version__

log = logging.getLogger(__name__)

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]
DROP_HEADERS = {"host", "content-length", "transfer-encoding", "connection", "keep-alive"}

router = APIRouter()


def _forward_headers(request: Request) -> Dict[str, str]:
    return {k: v for k, v in request.headers.items() if k.lower() not in DROP_HEADERS}


@router.get("/healthz")
async def healthz(request: Request) -> Dict[str, Any]:
    return {"ok": True, "upstream": request.app.state.settings.upstream_url}


@router.api_route("/api/proxy", methods=PROXY_METHODS)
async def proxy(request: Request, path: str = Query(default="")) -> Response:
    if not path:
        return JSONResponse({"error": "Missing path parameter"}, status_code=400)

    settings: RelaySettings = request.app.state.settings
    client: httpx.AsyncClient = request.app.state.http
    url = f"{settings.upstream_url}/{path.lstrip('/')}"
    headers = _forward_headers(request)

    content: Optional[bytes] = None
    raw = await request.body()
    if raw:
        try:
            content = json.dumps(json.loads(raw)).encode("utf-8")
            headers["content-type"] = "application/json"
        except ValueError:
            content = raw

    log.info("forwarding %s %s", request.method, url)
    try:
        upstream = await client.request(request.method, url, headers=headers, content=content)
        ctype = upstream.headers.get("content-type", "")
        if "application/json" in ctype:
            return JSONResponse(upstream.json(), status_code=upstream.status_code)
    except (httpx.HTTPError, ValueError) as exc:
        log.error("proxy to %s failed: %s", url, exc)
        return JSONResponse(
            {"error": "Proxy failed", "detail": str(exc) or type(exc).__name__},
            status_code=500,
        )

    if upstream.status_code >= 400:
        log.warning("upstream %s answered %d: %.256s", url, upstream.status_code, upstream.text)
    return Response(
        content=upstream.text,
        status_code=upstream.status_code,
        media_type=ctype or "text/plain",
    )


def create_app(
    settings: Optional[RelaySettings] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """FastAPI factory. `transport` lets tests swap the upstream transport."""
    cfg = settings or get_relay_settings()

    @asynccontextmanager
    async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.http = httpx.AsyncClient(timeout=cfg.timeout, transport=transport)
        try:
            yield
        finally:
            await app.state.http.aclose()

    app = FastAPI(title="Octra wallet relay", version=__version__, lifespan=_lifespan)
    app.state.settings = cfg
    app.include_router(router)
    return app


def serve(
    *,
    host: Optional[str] = None,
    port: Optional[int] = None,
    upstream: Optional[str] = None,
) -> None:
    """Run the relay with uvicorn; arguments override RELAY_* settings."""
    overrides = {
        k: v
        for k, v in (("host", host), ("port", port), ("upstream_url", upstream))
        if v is not None
    }
    base = get_relay_settings()
    cfg = RelaySettings(**{**base.model_dump(), **overrides}) if overrides else base
    setup_logging(service_name="octra-relay", level=cfg.log_level, log_format=cfg.log_format)

    # Lazy import so the module stays importable without uvicorn
    import uvicorn

    log.info("relay listening on %s:%d -> %s", cfg.host, cfg.port, cfg.upstream_url)
    uvicorn.run(
        create_app(cfg),
        host=cfg.host,
        port=cfg.port,
        log_level=cfg.log_level.lower(),
        workers=1,
    )


def main() -> None:
    serve()


if __name__ == "__main__":
    main()
