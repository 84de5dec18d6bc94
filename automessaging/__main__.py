from __future__ import annotations

import uvicorn

from automessaging.core.config import settings


def main() -> None:
    uvicorn.run("automessaging.main:app", host="0.0.0.0", port=settings.HTTP_PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
