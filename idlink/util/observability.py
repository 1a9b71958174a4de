"""Logfire setup for the idlink API.

Domain services open their own spans and log their decisions:

    with logfire.span("linking_service.link_accounts", primary_id=str(primary_id)):
        ...
        logfire.info("Accounts linked", group_id=str(group_id), member_count=3)

This module configures Logfire once per process and instruments the
libraries every request goes through. Sign-in requests carry passwords,
one-time codes and session cookies, so those never reach a span.
"""

import logfire
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from idlink.config import Settings

# Attribute names scrubbed on top of Logfire's defaults (password, secret,
# session, cookie, jwt, ...)
_CREDENTIAL_PATTERNS = ["backup_code", "two_factor_code", "totp"]

# Routes whose validated request values are credentials
_CREDENTIAL_PATH_PREFIXES = ("/auth/", "/account/backup-codes")


def configure_logfire(settings: Settings) -> None:
    """Configure Logfire for this process.

    Telemetry goes to Logfire cloud when OBSERVABILITY__SEND_TO_LOGFIRE is
    set, or otherwise when OBSERVABILITY__LOGFIRE_TOKEN is present. Without
    either, spans only go to the console.

    Args:
        settings: Application settings
    """
    if settings.observability.send_to_logfire is not None:
        send_to_logfire = settings.observability.send_to_logfire
    else:
        send_to_logfire = bool(settings.observability.logfire_token)

    config_kwargs = {
        "service_name": "idlink-api",
        "service_version": settings.git_sha,
        "environment": settings.environment,
        "send_to_logfire": send_to_logfire,
        "scrubbing": logfire.ScrubbingOptions(extra_patterns=_CREDENTIAL_PATTERNS),
        "console": logfire.ConsoleOptions(
            colors="auto",
            span_style="show-parents",
            include_timestamps=True,
            verbose=settings.debug,
        ),
    }
    if settings.observability.logfire_token:
        config_kwargs["token"] = settings.observability.logfire_token

    logfire.configure(**config_kwargs)

    logfire.info(
        "Observability configured",
        environment=settings.environment,
        git_sha=settings.git_sha,
        send_to_logfire=send_to_logfire,
    )


def request_attributes(request, attributes: dict) -> dict:
    """Span attributes for an incoming request.

    Validated values of sign-in and backup-code routes are dropped; the
    method, path and client address are kept.
    """
    result = {**attributes}

    path = request.url.path if hasattr(request, "url") else ""
    if path.startswith(_CREDENTIAL_PATH_PREFIXES):
        result.pop("values", None)

    # WebSocket scopes have no method
    if hasattr(request, "method"):
        result["method"] = request.method
    result["path"] = path
    if getattr(request, "client", None):
        result["client_host"] = request.client.host

    return result


def instrument_fastapi(app: FastAPI) -> None:
    """Trace every request handled by the app.

    Headers are not captured; they carry the session cookie.

    Args:
        app: FastAPI application instance
    """
    logfire.instrument_fastapi(
        app,
        capture_headers=False,
        request_attributes_mapper=request_attributes,
    )
    logfire.info("FastAPI instrumented")


def instrument_sqlalchemy(engine: AsyncEngine) -> None:
    """Trace identity store queries, tagging SQL with the active span.

    Args:
        engine: SQLAlchemy async engine
    """
    logfire.instrument_sqlalchemy(
        engine=engine.sync_engine,
        enable_commenter=True,
    )
    logfire.info("SQLAlchemy instrumented")


def instrument_httpx() -> None:
    """Trace outbound calls to Google, GitHub and Twilio Verify."""
    logfire.instrument_httpx()
    logfire.info("httpx instrumented")
