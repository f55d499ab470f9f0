import logging

import uvicorn

import config
from utils.logging_config import setup_logging

# Initialize centralized logging configuration before the app is imported
setup_logging()

from server import app  # noqa: E402


def main() -> None:
    logging.info(f"🚀 Starting server on {config.WEBAPP_HOST}:{config.WEBAPP_PORT}")
    # log_config=None keeps uvicorn on the handlers installed by setup_logging
    uvicorn.run(app, host=config.WEBAPP_HOST, port=config.WEBAPP_PORT, log_config=None)


if __name__ == '__main__':
    main()
