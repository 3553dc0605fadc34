import logging

import uvicorn

from exam_analysis.api.app import create_app
from exam_analysis.api.dependencies import get_settings

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()
    logger.info(
        f"Serving exam analysis API on {settings.host}:{settings.port} "
        f"(max_students={settings.max_students})"
    )
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
