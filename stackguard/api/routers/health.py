"""Health endpoint router exposing one audit run per request."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from stackguard.adapters import ContainerRuntimeError
from stackguard.checks import AuditRunnerPort


def api_create_health_router(auditor: AuditRunnerPort) -> APIRouter:
    """Create health-check router backed by the stack auditor.

    Args:
        auditor: Audit runner executed on every request.

    Returns:
        APIRouter: Router exposing `/health` endpoint.

    Raises:
        ValueError: Raised when auditor is invalid.
    """

    if auditor is None:
        raise ValueError("auditor must not be None")

    router = APIRouter(tags=["health"])

    @router.get("/health")
    def api_health_status() -> JSONResponse:
        """Return stack audit results.

        Returns:
            JSONResponse: 200 when no probe failed, 503 otherwise.
        """

        try:
            summary = auditor.audit_run()
        except ContainerRuntimeError as error:
            payload = {
                "status": "degraded",
                "runtime": "down",
                "detail": str(error),
            }
            return JSONResponse(content=payload, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

        payload = {"runtime": "up", **summary.summary_to_payload()}
        status_code = status.HTTP_200_OK if summary.failure_count == 0 else status.HTTP_503_SERVICE_UNAVAILABLE
        return JSONResponse(content=payload, status_code=status_code)

    return router
