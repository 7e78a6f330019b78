"""FastAPI application factory for the stack status surface."""

from fastapi import FastAPI

from stackguard.checks import AuditRunnerPort

from .routers import api_create_health_router


def create_api_application(auditor: AuditRunnerPort) -> FastAPI:
    """Create the FastAPI application instance for the status service.

    Args:
        auditor: Audit runner used by the health endpoint.

    Returns:
        FastAPI: Framework application instance.
    """

    application = FastAPI(title="stackguard")

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        return {"service": "stackguard", "status": "ready"}

    application.include_router(api_create_health_router(auditor=auditor))
    return application
