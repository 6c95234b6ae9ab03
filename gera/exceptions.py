"""
Custom exception classes and FastAPI exception handlers.

The service layer raises domain errors (like MissingValueOnRequestError)
without importing HTTP concepts. The handlers registered here translate
them into the uniform error envelope every client of this API expects:

    {"message": "<what the route was doing>", "error": "<error code>"}

Every failure of a card route answers 400, including unclassified errors,
which surface with their raw message. Unknown paths and methods answer 404.

Exception hierarchy:
    GeraAPIError (base)
    ├── MissingValueOnRequestError — record lacks a field its card type requires
    ├── InvalidCardTypeError       — record type is not one of the known card types
    ├── PassNotFoundError          — retrieval of an unknown serial number
    └── ImageRequestAbortedError   — thumbnail fetch failed or exceeded its limits
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

CREATE_CARD_MESSAGE = "Erro ao criar novo cartão."
RETRIEVE_CARD_MESSAGE = "Erro ao retornar cartão existente."
NOT_FOUND_MESSAGE = "Endpoint não encontrado."


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class GeraAPIError(Exception):
    """Base exception for all domain errors of the wallet card API."""

    error_code = "GeraAPIError"

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(self.detail)


# ---------------------------------------------------------------------------
# Domain exceptions
# ---------------------------------------------------------------------------

class MissingValueOnRequestError(GeraAPIError):
    """
    Raised when a card record is incomplete for its declared type.

    Attributes:
        missing_fields: Every request key that was required but absent.
            Alternatives are joined with "|" (e.g. "cpf|cnpj").
    """

    error_code = "MissingValueOnRequest"

    def __init__(self, missing_fields: list[str]):
        self.missing_fields = missing_fields
        super().__init__(f"Missing required fields: {', '.join(missing_fields)}")


class InvalidCardTypeError(GeraAPIError):
    """Raised when the record type is null or not a known card type."""

    error_code = "InvalidCardType"

    def __init__(self, card_type: object):
        self.card_type = card_type
        super().__init__(f"Invalid card type: {card_type!r}")


class PassNotFoundError(GeraAPIError):
    """Raised when no pass was issued under the requested serial number."""

    error_code = "PassNotFound"

    def __init__(self, serial_number: str):
        self.serial_number = serial_number
        super().__init__(f"Pass {serial_number} not found")


class ImageRequestAbortedError(GeraAPIError):
    """Raised when the thumbnail download fails, times out or is too large."""

    error_code = "ImageRequestAborted"

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Image request to {url} aborted: {reason}")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _route_message(request: Request) -> str:
    """Creation happens on POST, everything else under /card/ is retrieval."""
    if request.method == "POST":
        return CREATE_CARD_MESSAGE
    return RETRIEVE_CARD_MESSAGE


def _error_response(request: Request, error: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"message": _route_message(request), "error": error, **extra},
    )


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register custom exception handlers with the FastAPI application.

    This is called once during app creation in main.py.
    """

    @app.exception_handler(MissingValueOnRequestError)
    async def missing_value_handler(
        request: Request, exc: MissingValueOnRequestError
    ) -> JSONResponse:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.detail)
        return _error_response(
            request, exc.error_code, missingFields=exc.missing_fields
        )

    @app.exception_handler(GeraAPIError)
    async def domain_error_handler(
        request: Request, exc: GeraAPIError
    ) -> JSONResponse:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.detail)
        return _error_response(request, exc.error_code)

    @app.exception_handler(RequestValidationError)
    async def malformed_body_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.warning("%s %s malformed body: %s", request.method, request.url.path, exc.errors())
        return _error_response(request, "MalformedRequestBody")

    @app.exception_handler(StarletteHTTPException)
    async def not_found_handler(
        request: Request, exc: StarletteHTTPException
    ):
        # 405 included: a known path with an unsupported method is still "not found"
        if exc.status_code in (404, 405):
            return JSONResponse(
                status_code=404,
                content={"message": NOT_FOUND_MESSAGE, "error": "NotFound"},
            )
        return await http_exception_handler(request, exc)

    @app.middleware("http")
    async def unclassified_error_boundary(request: Request, call_next):
        # Domain errors are already converted by the handlers above; whatever
        # reaches this point is unexpected and surfaces with its raw message.
        try:
            return await call_next(request)
        except Exception as exc:
            logger.exception("%s %s failed unexpectedly", request.method, request.url.path)
            return _error_response(request, str(exc) or type(exc).__name__)
