"""
Uvicorn server runner with configurable logging.

Usage:
    python run.py

Environment variables (set in .env file):
    DEBUG=true - Enable debug logging
    PORT=8000 - Set server port (default: 8000)
    HOST=127.0.0.1 - Set server host (default: 127.0.0.1)
"""

import uvicorn
from execution_tracker.config import get_settings

if __name__ == "__main__":
    import os

    settings = get_settings()

    # HOST and PORT are plain environment variables, not part of Settings
    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "8000"))

    log_level = "debug" if settings.debug else "info"

    print(f"Starting {settings.app_name} server...")
    print(f"Host: {host}")
    print(f"Port: {port}")
    print(f"Log Level: {log_level}")
    print(f"Sync strategy: {settings.sync_resume_strategy}, page cap: {settings.sync_max_pages}")
    print(f"Docs available at: http://{host}:{port}/docs")

    uvicorn.run(
        "execution_tracker.main:app",
        host=host,
        port=port,
        reload=settings.debug,
        log_level=log_level,
        access_log=True,
    )
