from __future__ import annotations

import logging
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from playroom.config import get_host, get_log_level, get_port

logger = logging.getLogger(__name__)


def main() -> None:
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)

    logging.basicConfig(level=get_log_level())

    host = get_host()
    port = get_port()
    logger.info("Server listening on port %d", port)
    uvicorn.run("playroom.main:app", host=host, port=port, log_level=get_log_level().lower())


if __name__ == "__main__":
    main()
