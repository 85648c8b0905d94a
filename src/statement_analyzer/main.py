import os

import uvicorn

from statement_analyzer.app import app
from statement_analyzer.core import settings
from statement_analyzer.logger import get_logging_config

__all__ = ["app", "run"]


def run() -> None:
    uvicorn.run(
        app,
        host=os.getenv("HOST", settings.DEFAULT_HOST),
        port=settings.get_env_int("PORT", settings.DEFAULT_PORT, min_value=1),
        log_config=get_logging_config(),
    )


if __name__ == "__main__":
    run()
