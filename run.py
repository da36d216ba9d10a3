"""
Run the loan approval API.
Usage: python3 run.py   (from the repository root; HOST/PORT/DEBUG come from .env)
"""
import uvicorn

from config import settings

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
