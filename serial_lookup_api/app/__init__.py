"""
Application package initializer.

Contains the FastAPI entrypoint (``main``), configuration and logging
(``core``), request/response schemas, the service layer and the HTTP
routes.  Import ``create_app`` from ``main`` to build an application
with custom adapters.
"""
