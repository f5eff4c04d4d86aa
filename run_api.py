"""
Server entry point for the Johnny Whisper audio extraction API.
"""

import argparse
import uvicorn
from dotenv import load_dotenv

from app.config import config
from app.utils.logger import logging


def main():
    """Run the FastAPI server."""
    # Load environment variables
    load_dotenv()

    # Parse command line arguments
    parser = argparse.ArgumentParser(description="YouTube audio extraction server")
    parser.add_argument("--host", default=config.host, help="Host to bind the server to")
    parser.add_argument("--port", type=int, default=config.port, help="Port to bind the server to")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload for development")
    args = parser.parse_args()

    # Initialize directories
    config.initialize()

    logging.info(f"Starting {config.app_name} API server v{config.app_version}")
    logging.info(f"Environment: {config.environment}")
    logging.info(f"Binding to: {args.host}:{args.port}")
    logging.info(f"Health check: http://localhost:{args.port}/api/health")

    # Run the server
    uvicorn.run(
        "app.api.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
