"""Voya REST API: FastAPI application served through API Gateway and Lambda."""
