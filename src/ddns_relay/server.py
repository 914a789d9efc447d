"""
FastAPI server for DDNS Relay.

Every path and method is routed to the update handler, so the relay can be
dropped in wherever DynDNS clients expect an update URL. The handler is the
only place where outcomes are turned into HTTP responses.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette import status as st_status

from ddns_relay import __version__
from ddns_relay.auth import decode_credentials
from ddns_relay.config import Config, load_config
from ddns_relay.models import Failure
from ddns_relay.providers.cloudflare import CloudFlareProvider
from ddns_relay.reconciler import Reconciler
from ddns_relay.records import build_desired_records

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator
    from typing import Final

    from ddns_relay.models import ReconcileReport


logger = logging.getLogger(__name__)

UPDATE_PATH: Final[str] = "/{path:path}"

SUCCESS_BODY: Final[str] = "OK"
INTERNAL_ERROR_BODY: Final[str] = "Internal Server Error"

# Global config (set during startup)
_config: Config | None = None

# Reconciler bound to the configured provider (created on first use)
_reconciler: Reconciler | None = None


def get_config() -> Config:
    """Get the current configuration."""
    if _config is None:
        msg = "Configuration not loaded"
        raise RuntimeError(msg)
    return _config


def set_preloaded_config(config: Config) -> None:
    """
    Inject a pre-loaded configuration into the server module.

    This lets the CLI entry point hand over the parsed configuration so
    that the lifespan handler does not parse command-line arguments again.

    Parameters
    ----------
    config : Config
        The configuration object to set.
    """
    global _config, _reconciler  # noqa: PLW0603
    _config = config
    _reconciler = None


def get_reconciler() -> Reconciler:
    """Get the reconciler, creating it from the configuration on first use."""
    global _reconciler  # noqa: PLW0603
    if _reconciler is None:
        config = get_config()
        provider = CloudFlareProvider(
            api_base=config.provider.api_base,
            timeout=config.provider.timeout,
        )
        _reconciler = Reconciler(provider)
    return _reconciler


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    global _config  # noqa: PLW0603

    # If config was not set by CLI (e.g., running via uvicorn directly),
    # load it here
    if _config is None:
        _config = load_config()

    if _config.health.enabled:
        _app.add_api_route("/health", health, methods=["GET"])
        # Move ahead of the catch-all update route
        _app.router.routes.insert(0, _app.router.routes.pop())

    logger.info(
        'DDNS Relay starting on "%s:%d" (provider API: "%s").',
        _config.server.host,
        _config.server.port,
        _config.provider.api_base,
    )

    yield

    logger.info("DDNS Relay shutting down.")


app = FastAPI(
    title="DDNS Relay",
    description="Dynamic DNS update endpoint for CloudFlare",
    version=__version__,
    lifespan=lifespan,
    # Every path belongs to the update route
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)


async def _process_update(
    request: Request,
    config: Config,
) -> ReconcileReport | Failure:
    """
    Decode, parse and reconcile a single update request.

    Parameters
    ----------
    request : Request
        The incoming request.
    config : Config
        The current configuration.

    Returns
    -------
    ReconcileReport | Failure
        The reconciliation report, or the first failure encountered.
    """
    credentials = decode_credentials(request.headers)
    if isinstance(credentials, Failure):
        return credentials

    # First occurrence wins for repeated query keys
    params = {k: v for k, v in reversed(request.query_params.multi_items())}

    records = build_desired_records(
        params,
        request.headers,
        ip_header=config.server.client_ip_header,
    )
    if isinstance(records, Failure):
        return records

    logger.info(
        "[request] email=%s records=%s",
        credentials.email,
        ", ".join(f"{r.label}={r.content}" for r in records),
    )

    return await get_reconciler().reconcile(credentials, records)


async def handle_update(request: Request) -> Response:
    """
    Handle a dynamic DNS update request.

    Parameters
    ----------
    request : Request
        The incoming request.

    Returns
    -------
    Response
        `200 OK` on success, the failure's status and message on a known
        failure, or a generic 500 for anything unexpected.
    """
    start_time = time.monotonic()

    try:
        config = get_config()

        logger.info(
            "[request] Requester IP: %s",
            request.headers.get(config.server.client_ip_header),
        )
        logger.info("[request] %s: %s", request.method, request.url)
        body = await request.body()
        if body:
            logger.debug("[request] Body: %s", body.decode("utf-8", errors="replace"))

        outcome = await _process_update(request, config)
    except Exception:
        # Details stay in the server log
        logger.exception("Error updating DNS record.")
        return PlainTextResponse(
            INTERNAL_ERROR_BODY,
            status_code=st_status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    duration = time.monotonic() - start_time

    if isinstance(outcome, Failure):
        logger.warning(
            "Error updating DNS record: %s (kind=%s duration=%.2fs)",
            outcome.message,
            outcome.kind,
            duration,
        )
        return PlainTextResponse(outcome.message, status_code=outcome.status_code)

    logger.info(
        "[response] status=success updated=%d skipped=%d duration=%.2fs",
        len(outcome.updated),
        len(outcome.skipped),
        duration,
    )
    return PlainTextResponse(SUCCESS_BODY, status_code=st_status.HTTP_200_OK)


async def update(request: Request) -> Response:
    """
    Update DNS records (any path, any method).

    Credentials come from the `Authorization` header as
    `<scheme> base64(email:token)`; `hostname` and `ip` (or `myip`) come from
    the query string.
    """
    return await handle_update(request)


def add_update_route(target: FastAPI) -> None:
    """
    Register the catch-all update route on an application.

    A plain Starlette route without a method list is used, so every HTTP
    method (including non-standard ones such as PROPFIND) reaches the
    handler instead of a 405 response.

    Parameters
    ----------
    target : FastAPI
        The application to register the route on.
    """
    target.add_route(UPDATE_PATH, update, include_in_schema=False)


add_update_route(app)


# Note: Unlike the route above, this endpoint is dynamically registered
# in lifespan() based on config.health.enabled.
async def health() -> Response:
    """Health check endpoint."""
    return JSONResponse(content={"status": "ok"})
