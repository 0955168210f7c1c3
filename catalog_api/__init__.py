"""Product catalog API.

FastAPI service exposing create, fetch, update, delete and paginated
listing of catalog products backed by an async SQLAlchemy store.
"""
