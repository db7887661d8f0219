"""Run the outage board API: ``python -m outage_board``."""

import logging

import uvicorn

from outage_board.config import get_settings


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("outage_board.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
