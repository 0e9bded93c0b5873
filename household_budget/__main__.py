"""
Run the budget API with ``python -m household_budget`` or ``household-budget``.
"""
import uvicorn

from household_budget.core.config import Environment, settings
from household_budget.core.logging import logger


def main() -> None:
    api = settings.api
    # Auto-reload only outside production; reload needs an import string
    reload = settings.debug and settings.environment != Environment.PRODUCTION

    logger.info(
        f"Serving {api.title} v{api.version} on http://{api.host}:{api.port} "
        f"({settings.environment.value}, reload={reload})"
    )
    uvicorn.run(
        "household_budget.main:app",
        host=api.host,
        port=api.port,
        reload=reload,
        log_level=settings.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
