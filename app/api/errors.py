"""HTTP mapping of generation and rendering errors."""
from fastapi import HTTPException
from app.core.errors import (
    GenerationError,
    GenerationInvalid,
    GenerationTimeout,
    GenerationUpstreamFailure,
    UnsupportedViewKind,
)

STATUS_BY_ERROR = {
    GenerationInvalid: 422,
    GenerationUpstreamFailure: 502,
    GenerationTimeout: 504,
}


def generation_http_error(error: GenerationError) -> HTTPException:
    status = STATUS_BY_ERROR.get(type(error), 500)
    detail = {"code": error.code, "message": error.message}
    if isinstance(error, GenerationInvalid):
        detail["errors"] = [e.to_dict() for e in error.errors]
    return HTTPException(status_code=status, detail=detail)


def view_kind_http_error(error: UnsupportedViewKind) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail={"code": "UNSUPPORTED_VIEW_KIND", "message": str(error), "supported": error.supported},
    )
