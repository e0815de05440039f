"""Main entry point for the WordFlow Translation API."""

import uvicorn
from src.wordflow.config import get_settings


def main():
    """Run the translation API server."""
    settings = get_settings()

    print("Starting WordFlow Translation API...")
    print(f"Server will run on http://{settings.api_host}:{settings.api_port}")
    print(f"API Documentation available at http://{settings.api_host}:{settings.api_port}/docs")

    uvicorn.run(
        "src.wordflow.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    main()
