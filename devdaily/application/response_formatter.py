"""JSON envelope builder.

Every JSON response has the shape ``{status, message, data, meta}``.
"""

from typing import Any

from devdaily.api.schemas import ApiResponse, ErrorResponse
from devdaily.dtos.pagination import PaginatedResult


class ResponseFormatter:
    @staticmethod
    def success(data: Any = None, message: str = "Success", meta: dict[str, Any] | None = None) -> dict[str, Any]:
        return ApiResponse(status="success", message=message, data=data, meta=meta).model_dump()

    @staticmethod
    def created(data: Any = None, message: str = "Created successfully") -> dict[str, Any]:
        return ApiResponse(status="success", message=message, data=data).model_dump()

    @staticmethod
    def paginated(
        result: PaginatedResult, items: list[Any], message: str = "Success", extra_meta: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        meta = {"pagination": result.meta(), **(extra_meta or {})}
        return ApiResponse(status="success", message=message, data=items, meta=meta).model_dump()

    @staticmethod
    def error(
        message: str,
        error_code: str = "ERROR",
        errors: dict[str, Any] | None = None,
        request_id: str | None = None,
    ) -> dict[str, Any]:
        return ErrorResponse(
            message=message,
            errors=errors or {},
            error_code=error_code,
            request_id=request_id,
        ).model_dump()
