"""Application entry point.

This module serves as the entry point for running the FastAPI application
with uvicorn.
"""

import uvicorn

if __name__ == "__main__":
    uvicorn.run("wedding_planner.main:app", host="localhost", port=8000, reload=True)
