import logging

import uvicorn

from roundrobin.api.main import create_app
from roundrobin.config import load_settings

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def main():
    settings = load_settings()
    configure_logging(settings.log_level)

    app = create_app(settings)
    logger.info(f"Backend running at http://{settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
