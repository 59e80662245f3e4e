"""
Autometer API server.

    uvicorn main:app --reload

or ``python main.py`` to serve on the configured host and port.
"""

import uvicorn

from autometer.api.app import create_app
from autometer.config import settings

app = create_app()

if __name__ == "__main__":
    uvicorn.run("main:app", host=settings.host, port=settings.port, reload=True)
