"""Dating app entrypoint.

Run with:
  python -m dating
"""

import logging

import uvicorn

from dating.config import load_settings


def main() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger(__name__).info("Dating app running at http://localhost:%s", settings.port)
    uvicorn.run(
        "dating.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
