"""
HTTP layer: FastAPI routes, dependencies and request/response models.
"""
