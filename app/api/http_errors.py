from __future__ import annotations

from collections.abc import Mapping

from fastapi import HTTPException

from app.services.errors import EngineError


_KIND_STATUSES: Mapping[str, int] = {
    "not_found": 404,
    "forbidden": 403,
    "conflict": 409,
    "invalid_content": 422,
}


def engine_error(exc: EngineError) -> HTTPException:
    status = _KIND_STATUSES.get(exc.kind, 400)
    return HTTPException(status_code=status, detail={"code": exc.code, "message": exc.message})
