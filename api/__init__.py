"""api/ -- HTTP boundary: FastAPI app, routes and transport models."""
