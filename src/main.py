"""Main FastAPI application entry point for the YouTube ingestion service.

This file only starts the server; all application logic is in src.api.main.
"""

from src.api.main import app

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("src.main:app", host="127.0.0.1", port=8030, reload=True)
