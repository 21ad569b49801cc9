"""
FastAPI Calendar Backend package.

The application instance lives in `src.api.main:app`.
"""
