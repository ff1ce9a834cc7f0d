from __future__ import annotations

import uvicorn

from playground_api.dependencies import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "playground_api.app:app",
        host=settings.PLAYGROUND_API_HOST,
        port=settings.PLAYGROUND_API_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
