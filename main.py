"""Run the studio API under uvicorn.

    python main.py --port 8080 --reload
"""
import argparse

import structlog
import uvicorn

from studio.config import settings
from studio.logging_config import setup_logging

logger = structlog.get_logger("studio.main")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve the studio site API")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--reload", action="store_true", default=settings.debug, help="Reload on source changes")
    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()
    setup_logging(settings.logging)
    logger.info(
        "serving",
        app=settings.app_name,
        version=settings.version,
        database=settings.db.url.rsplit("@", 1)[-1],
        media_root=settings.media.root_dir,
        notifier=settings.notifier.backend.value,
        reload=args.reload,
    )

    uvicorn.run(
        "studio.api:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        reload_dirs=["studio"] if args.reload else None,
        log_config=None,
        log_level=settings.logging.level.lower(),
    )
