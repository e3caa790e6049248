"""
Practiceboard FastAPI Application
=================================
Simple entry point for running the assessment API.

The application itself is built in practiceboard/app_factory.py and
instantiated in practiceboard/main.py.
"""

from practiceboard.main import app

# This enables uvicorn to run the application when specified as 'main:app'
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
