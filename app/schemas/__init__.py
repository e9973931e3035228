from .api import ApiResponse, ErrorDetail, ResponseMeta
from .auth import CurrentUser

__all__ = [
    "ApiResponse",
    "ErrorDetail",
    "ResponseMeta",
    "CurrentUser",
]
