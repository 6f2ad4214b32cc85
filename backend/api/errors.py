from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def error_response(code: str, message: str, status_code: int, details: Any = None) -> JSONResponse:
    body: dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        body["details"] = jsonable_encoder(details)
    return JSONResponse(status_code=status_code, content={"error": body})


def unauthorized() -> JSONResponse:
    return error_response("UNAUTHORIZED", "Invalid or missing API key", 401)


def not_found(resource: str) -> JSONResponse:
    return error_response("NOT_FOUND", f"{resource} not found", 404)


def invalid_request(message: str, details: Any = None) -> JSONResponse:
    return error_response("INVALID_REQUEST", message, 400, details)


def internal_error(message: str = "An internal error occurred") -> JSONResponse:
    return error_response("INTERNAL_ERROR", message, 500)
