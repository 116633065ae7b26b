import uvicorn
import os

import structlog

from app.logging_config import configure_logging

# Define the host and port for the application
# Use environment variables if available, otherwise default to localhost:8000
HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "8000"))
# Auto-restart on code changes; development only
RELOAD = os.getenv("RELOAD", "false").lower() in ("1", "true", "yes")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

if __name__ == "__main__":
    configure_logging(LOG_LEVEL)
    structlog.get_logger(__name__).info("server_starting", url=f"http://{HOST}:{PORT}", reload=RELOAD)

    # "app.main:app": Uvicorn will look for the 'app' instance in the 'app/main.py' file.
    uvicorn.run("app.main:app", host=HOST, port=PORT, reload=RELOAD, log_level=LOG_LEVEL.lower())
