"""
Module 09D - Control API (FastAPI)

HTTP API of a running station:
- GET /health - Health check
- POST /on-demand - Queue an on-demand check
- GET /metrics - Current round counters

Usage:
    from api.app import create_app, start_control_api
"""
