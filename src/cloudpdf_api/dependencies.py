from fastapi import Request

from cloudpdf_api.adapters import FileOrigin, LocalCacheOrigin, PresignedOrigin
from cloudpdf_api.config.settings import Settings


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_origin(request: Request) -> FileOrigin:
    """The file origin built at startup."""
    return request.app.state.origin


def get_local_origin(request: Request) -> LocalCacheOrigin:
    return request.app.state.origin


def get_presigned_origin(request: Request) -> PresignedOrigin:
    return request.app.state.origin
