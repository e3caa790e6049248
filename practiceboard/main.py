"""
Practiceboard FastAPI Application

Application entry point: builds the app from environment settings.
"""

import uvicorn

from practiceboard.app_factory import create_application

app = create_application()


if __name__ == "__main__":
    uvicorn.run("practiceboard.main:app", host="0.0.0.0", port=8000)
