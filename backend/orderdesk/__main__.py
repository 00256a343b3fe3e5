"""Run the service: python -m orderdesk"""

import uvicorn

from orderdesk.config import Settings


def main() -> None:
    settings = Settings.from_env()
    uvicorn.run(
        "orderdesk.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
