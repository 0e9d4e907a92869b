"""FastAPI development server launcher.

Usage:
    python run_api.py

The server will start on http://localhost:8000
API docs available at http://localhost:8000/api/docs
"""

import logging

import uvicorn

from runquest.config import config

if __name__ == "__main__":
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    print("Starting RunQuest API...")
    print("API docs: http://localhost:8000/api/docs")
    print("Health check: http://localhost:8000/api/health")
    print("\nPress Ctrl+C to stop\n")

    uvicorn.run(
        "runquest.interfaces.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=config.ENVIRONMENT != "production",
        log_level="info",
    )
