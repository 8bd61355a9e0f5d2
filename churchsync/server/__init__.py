"""
ChurchSync Server Package.

This package contains the web server of the ChurchSync platform.

Subpackages:
    api: FastAPI route definitions and endpoint logic.
    core: Server configuration and constants.
    services: Business logic used by the routes.
    exception_handlers: Error to response mapping.
    middleware: Request timing and logging.
"""
