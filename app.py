#!/usr/bin/env python3
"""
Main entry point for URL shortener service.

Concurrency: one uvicorn worker serves many connections on a single event
loop. The file backend serializes access behind an asyncio lock; the
PostgreSQL backend uses an asyncpg connection pool.

Usage:
    python app.py [-a host:port] [-b base_url] [-f file] [-d dsn] [-k key] [-t cidr] [-c config.json]

Environment variables:
    SERVER_ADDRESS - host:port to listen on
    BASE_URL - Base URL for short links
    FILE_STORAGE_PATH - Append-only storage log (empty for in-memory)
    DATABASE_DSN - PostgreSQL DSN (takes precedence over file storage)
    SECRET_KEY - Key signing AUTH_TOKEN cookies
    TRUSTED_SUBNET - CIDR allowed to read internal stats
    CONFIG - JSON configuration file
    LOG_LEVEL - Logging level
"""

import argparse
import signal
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from config import load_config
from shortener.service import URLShortenerService
from shortener.shortcode import ShortCodeGenerator
from shortener.storage import create_storage
from shortener.common.logging_config import setup_logging
from web_app import create_app


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    config = app.state.config
    logger = app.state.logger
    
    logger.info("Starting URL shortener service...")
    
    storage = create_storage(config, logger=logger)
    await storage.initialize()
    
    generator = ShortCodeGenerator(code_bytes=config.short_code_bytes)
    service = URLShortenerService(
        storage=storage,
        base_url=config.base_url,
        short_code_generator=generator,
        logger=logger,
    )
    
    app.state.storage = storage
    app.state.service = service
    
    logger.info(f"Service started with {storage.name} storage")
    
    yield
    
    logger.info("Shutting down URL shortener service...")
    await service.close()
    logger.info("Service stopped")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="URL shortener service")
    parser.add_argument("-a", dest="address",
                        help="address to listen on (host:port)")
    parser.add_argument("-b", dest="base_url", help="base URL of short links")
    parser.add_argument("-f", dest="file_storage_path", help="append-only storage file")
    parser.add_argument("-d", dest="database_dsn", help="PostgreSQL DSN")
    parser.add_argument("-k", dest="secret_key", help="key signing auth cookies")
    parser.add_argument("-t", dest="trusted_subnet", help="CIDR allowed to read stats")
    parser.add_argument("-c", dest="config_file", help="JSON configuration file")
    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)
    
    # Flags win over environment and config file
    config = load_config(
        config_file=args.config_file,
        server_address=args.address,
        base_url=args.base_url,
        file_storage_path=args.file_storage_path,
        database_dsn=args.database_dsn,
        secret_key=args.secret_key,
        trusted_subnet=args.trusted_subnet,
    )
    
    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )
    
    logger.info("URL Shortener Service")
    logger.info(f"Configuration: {config.model_dump(exclude={'secret_key', 'database_dsn'})}")
    
    # Storage and service are created in lifespan
    app = create_app(
        storage_instance=None,
        service_instance=None,
        config=config,
    )
    app.state.logger = logger
    app.router.lifespan_context = lifespan
    
    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        access_log=False,
    )
    
    server = uvicorn.Server(uvicorn_config)
    
    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True
    
    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)
    
    try:
        logger.info(f"Starting server on {config.host}:{config.port}")
        server.run()
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
