"""
HTTP route handlers for application endpoints.
"""

import azure.functions as func

from shared.container import ServiceContainer
from shared.permissions import owned_by
from .schemas import AcceptApplicationPayload, CreateApplicationPayload
from .service import ApplicationService


def register_application_routes(app: func.FunctionApp, container: ServiceContainer):
    """Register all application routes with the function app."""
    pipeline = container.pipeline

    @app.route(route="applications", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
    async def create_application(req: func.HttpRequest) -> func.HttpResponse:
        """
        POST /api/applications
        Apply to a service request.
        """
        service = ApplicationService(container.gateway)
        return await pipeline.handle(
            req,
            lambda ctx: service.create(ctx.subject_id, ctx.body),
            body=CreateApplicationPayload,
            status_code=201,
            action="create application",
        )

    @app.route(route="applications/request/{request_id}", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
    async def list_request_applications(req: func.HttpRequest) -> func.HttpResponse:
        """
        GET /api/applications/request/{request_id}
        List applications for one of the current user's requests.
        """
        service = ApplicationService(container.gateway)
        return await pipeline.handle(
            req,
            lambda ctx: service.list_for_request(ctx.route_param("request_id")),
            checks=lambda ctx: [
                owned_by(
                    "solicitudes",
                    ctx.route_param("request_id"),
                    "usuario_id",
                    "Service request",
                    forbidden_message="You can't view applications for another user's request",
                )
            ],
            action="list applications",
        )

    @app.route(route="applications/{application_id}/accept", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
    async def accept_application(req: func.HttpRequest) -> func.HttpResponse:
        """
        POST /api/applications/{application_id}/accept
        Select a caregiver for a request at the agreed rate.
        """
        service = ApplicationService(container.gateway)
        return await pipeline.handle(
            req,
            lambda ctx: service.accept(ctx.subject_id, ctx.route_param("application_id"), ctx.body),
            body=AcceptApplicationPayload,
            action="accept application",
        )
