"""Core stream reduction primitives (decoding, per-game parsing, aggregation).

Kept free of FastAPI and Redis concerns so it can be reused by the API, the CLI, and tests.
"""
