"""
Top-level package for the Narthex key-registration service.

The service exposes a FastAPI app (see `main.py`) with:

- GET /health
- PUT /register/0x<hex>
"""
