"""Run the local API server: python -m liftlog"""

import uvicorn

from liftlog.core.config import get_settings

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run("liftlog.main:app", host="127.0.0.1", port=8000, reload=settings.debug, log_config=None)
