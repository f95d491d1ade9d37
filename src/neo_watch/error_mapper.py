"""Mapping of domain exceptions to HTTP responses."""
import logging
from dataclasses import dataclass

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from neo_watch.auth import AuthError
from neo_watch.errors import (AlreadyWatched, InvalidMessage, NeoWatchError,
                              NotFound, ProviderError, StorageFault)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DomainErrorMapper:
    """Maps domain exceptions to HTTP (status_code, detail).

    User-facing operations collapse to a small stable set: not found (404),
    conflict (409), validation (422), unauthenticated (401) and transient
    upstream/storage failures (502/503/504).
    """

    api_name: str = "NeoWs"

    def to_http(self, exc: Exception) -> tuple[int, str]:
        """Map an exception to (status_code, detail) for HTTP responses.

        Args:
            exc: The exception raised by a store, service or gateway.

        Returns:
            (status_code, detail) suitable for a JSON error response.
        """
        if isinstance(exc, AuthError):
            return (401, str(exc))
        if isinstance(exc, NotFound):
            return (404, str(exc) or "Not found")
        if isinstance(exc, AlreadyWatched):
            return (409, str(exc))
        if isinstance(exc, InvalidMessage):
            return (422, str(exc))
        if isinstance(exc, StorageFault):
            return (503, "Storage temporarily unavailable")
        if isinstance(exc, ProviderError):
            if exc.status_code == 404:
                return (404, "Object not found at data provider")
            if exc.timeout:
                return (504, f"Request to {self.api_name} timed out")
            return (502, f"{self.api_name} error")
        return (500, "Internal server error")

    def install(self, app: FastAPI) -> None:
        """Register one exception handler for every NeoWatchError."""

        async def handle(_: Request, exc: NeoWatchError) -> JSONResponse:
            status_code, detail = self.to_http(exc)
            if status_code >= 500:
                logger.warning("Request failed with %s: %s", status_code, exc)
            headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
            return JSONResponse(status_code=status_code, content={"detail": detail}, headers=headers)

        app.add_exception_handler(NeoWatchError, handle)
