from .client import GeoMapClient
from .errors import ApiError, AuthError, GeoMapClientError, NetworkError, RequestBuildError
from .models import MapBounds, MultipartForm, UploadProgress

__all__ = [
    "GeoMapClient",
    "GeoMapClientError",
    "ApiError",
    "AuthError",
    "NetworkError",
    "RequestBuildError",
    "MapBounds",
    "MultipartForm",
    "UploadProgress",
]
