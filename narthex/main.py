"""
FastAPI app for the key-registration service.

Endpoints:
- GET /health
- PUT /register/0x<hex>

`create_app` builds a configured app; the module-level `app` is the one
built from `config`, so `uvicorn narthex.main:app` works as well as the
`narthex` console script. The key root is created on startup if missing.
"""

from __future__ import annotations

import argparse
import logging
from contextlib import asynccontextmanager
from http import HTTPStatus
from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, FastAPI, Request, Response
from starlette.concurrency import run_in_threadpool
from starlette.middleware.trustedhost import TrustedHostMiddleware

from . import config
from .registration import register_key, status_for
from .registry.filesystem_store import FilesystemKeyStore
from .schemas import HealthResponse, RegistrationRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@asynccontextmanager
async def lifespan(app: FastAPI):
    root: Path = app.state.store.root
    root.mkdir(mode=0o700, parents=True, exist_ok=True)
    logger.info("storing keys under %s", root)
    yield


async def server_header(request: Request, call_next):
    response = await call_next(request)
    response.headers["server"] = config.SERVER_NAME
    return response


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Simple health-check endpoint."""
    return HealthResponse(status="ok")


async def _read_body(request: Request, limit: int) -> Optional[bytes]:
    """Return the request body, or None as soon as it grows past `limit`."""
    buf = bytearray()
    async for chunk in request.stream():
        buf += chunk
        if len(buf) > limit:
            return None
    return bytes(buf)


# `path` lets an empty or malformed identifier through to the core, which
# answers 400 for it instead of the router answering 404.
@router.put("/register/{key_path:path}")
async def register(request: Request) -> Response:
    """
    Register the request body as the key for the identifier in the path.

    The response body is always empty; the status code is the verdict.
    """
    body = await _read_body(request, request.app.state.body_max)
    if body is None:
        return Response(status_code=HTTPStatus.REQUEST_ENTITY_TOO_LARGE)

    req = RegistrationRequest.from_body(request.method, request.url.path, body)
    store: FilesystemKeyStore = request.app.state.store

    # File I/O is blocking, keep it off the event loop.
    outcome = await run_in_threadpool(register_key, req, store)
    return Response(status_code=status_for(outcome))


def create_app(
    store: FilesystemKeyStore,
    domain: Optional[str] = None,
    body_max: int = config.BODY_MAX,
) -> FastAPI:
    """
    Build the app around `store`.

    With `domain` set, requests carrying any other Host header are
    answered 400 by `TrustedHostMiddleware` before reaching the store.
    """
    app = FastAPI(
        title="Narthex Key Registration Service",
        version="0.1.0",
        description="Write-once registration of key blobs under a 32-bit identifier.",
        lifespan=lifespan,
    )
    app.include_router(router)
    app.middleware("http")(server_header)
    if domain:
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=[domain])

    # Tests replace these on the module-level app.
    app.state.store = store
    app.state.body_max = body_max
    return app


app = create_app(FilesystemKeyStore(config.KEY_ROOT), domain=config.DOMAIN)


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="narthex", description="Write-once key registration service."
    )
    parser.add_argument("-i", "--ip", default=config.HOST, help="address to bind on")
    parser.add_argument("-p", "--port", type=int, default=config.PORT, help="port to bind on")
    parser.add_argument(
        "-r", "--root", default=str(config.KEY_ROOT), help="directory holding the key records"
    )
    parser.add_argument("-c", "--cert", default=config.CERTFILE, help="path to the TLS certificate")
    parser.add_argument("-k", "--key", default=config.KEYFILE, help="path to the TLS private key")
    parser.add_argument(
        "-d", "--domain", default=config.DOMAIN, help="only serve requests for this host name"
    )
    parser.add_argument(
        "--log-level",
        default=config.LOG_LEVEL,
        choices=["critical", "error", "warning", "info", "debug"],
    )
    args = parser.parse_args(argv)

    if bool(args.cert) != bool(args.key):
        parser.error("a certificate and a private key must be given together")
    return args


def run(argv: Optional[List[str]] = None) -> None:
    """
    Entrypoint for the `narthex` console_script defined in pyproject.toml,
    or `python -m narthex.main`.
    """
    import uvicorn

    args = _parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    served = create_app(FilesystemKeyStore(Path(args.root).resolve()), domain=args.domain)

    if args.cert is None:
        logger.warning("no certificate configured, serving plain HTTP")

    uvicorn.run(
        served,
        host=args.ip,
        port=args.port,
        ssl_certfile=args.cert,
        ssl_keyfile=args.key,
        log_level=args.log_level,
        server_header=False,
        timeout_keep_alive=1,
        reload=False,
    )


if __name__ == "__main__":
    run()
