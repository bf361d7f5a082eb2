import uvicorn

from backoffice.app import app
from backoffice.config import settings


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000, log_level="debug" if settings.debug else "info")
