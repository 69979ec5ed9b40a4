"""
creditmemo.web
~~~~~~~~~~~~~~
HTTP surface: FastAPI routes (``api``) and the uvicorn launcher (``server``).
"""
