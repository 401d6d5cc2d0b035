"""api/routes/ -- FastAPI routers."""
