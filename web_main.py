"""
Entry point for the analysis web service.

Development (hot-reload):
    uv run python web_main.py      ← API and WebSocket on :8000
"""

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "ucianalysis.web.app:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
