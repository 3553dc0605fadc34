from functools import lru_cache

from fastapi import Request

from exam_analysis.api.config import ApiSettings
from exam_analysis.core.paths import get_project_version


@lru_cache(maxsize=1)
def get_settings() -> ApiSettings:
    return ApiSettings()


def get_app_settings(request: Request) -> ApiSettings:
    settings: ApiSettings = request.app.state.settings
    return settings


def get_version() -> str:
    return get_project_version()
