# responses.py
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def envelope(success: bool, message: str, data=None, errors=None, **extra) -> dict:
    """Uniform response body: success, message, then data/errors when present."""
    body = {"success": success, "message": message}
    body.update(extra)
    if data is not None:
        body["data"] = data
    if errors is not None:
        body["errors"] = errors
    return body


def envelope_response(status_code: int, success: bool, message: str, **kwargs) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(envelope(success, message, **kwargs)),
    )
