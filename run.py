"""
Runnable script for the UDAO mining ledger API.
"""

import argparse
import uvicorn
from udao_mining.api.main import app as api_app
from udao_mining.config import settings
import structlog

logger = structlog.get_logger()


def start_api_server(host, port):
    """Starts the FastAPI server."""
    logger.info("Starting API server...", host=host, port=port)
    uvicorn.run(api_app, host=host, port=port)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="UDAO Mining Ledger")
    parser.add_argument("--host", default=settings.API_HOST, help="Interface to bind")
    parser.add_argument("--port", type=int, default=settings.API_PORT, help="Port to listen on")
    args = parser.parse_args()

    start_api_server(args.host, args.port)
