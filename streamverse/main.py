#!/usr/bin/env python3
import logging
import argparse
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from streamverse import __version__
from streamverse.config import load_config
from streamverse.models import AppConfig
from streamverse.core import StreamVerse

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_app(config: AppConfig, start_refresh_loop: bool = True) -> tuple[FastAPI, StreamVerse]:
    """Create FastAPI app and StreamVerse instance"""
    streamverse_instance = StreamVerse(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await streamverse_instance.initialize(start_refresh_loop=start_refresh_loop)
        yield
        await streamverse_instance.cleanup()

    app = FastAPI(
        title="StreamVerse",
        description="Channel directory aggregated from M3U, Xtream and verified sources",
        version=__version__,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.streamverse = streamverse_instance

    from streamverse.api.routes import router
    app.include_router(router)

    return app, streamverse_instance


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(description="StreamVerse channel directory")
    parser.add_argument(
        "--config",
        default="config.yaml",
        help="Path to configuration file"
    )
    parser.add_argument("--host", help="Override bind host")
    parser.add_argument("--port", type=int, help="Override bind port")

    args = parser.parse_args()

    try:
        config = load_config(args.config)

        if args.host:
            config.bind_host = args.host
        if args.port:
            config.bind_port = args.port

        logging.getLogger().setLevel(getattr(logging, config.log_level.upper()))

        app, streamverse = create_app(config)

        logger.info(f"Starting server on {config.bind_host}:{config.bind_port}")
        logger.info(f"Serving {len(config.sources)} configured sources")
        uvicorn.run(
            app,
            host=config.bind_host,
            port=config.bind_port,
            log_level=config.log_level.lower()
        )

    except FileNotFoundError as e:
        logger.error(f"Configuration error: {e}")
    except Exception as e:
        logger.error(f"Failed to start: {e}")
        raise


if __name__ == "__main__":
    main()
