"""
HTTP route handlers for caregiver profile endpoints.
"""

import azure.functions as func

from shared.container import ServiceContainer
from .schemas import UpdateCaregiverPayload
from .service import CaregiverService


def register_caregiver_routes(app: func.FunctionApp, container: ServiceContainer):
    """Register all caregiver-related routes with the function app."""
    pipeline = container.pipeline

    @app.route(route="caregivers/me", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
    async def get_my_caregiver_profile(req: func.HttpRequest) -> func.HttpResponse:
        """
        GET /api/caregivers/me
        Get the current user's caregiver profile.
        """
        service = CaregiverService(container.gateway)
        return await pipeline.handle(
            req,
            lambda ctx: service.get_my_profile(ctx.subject_id),
            action="get caregiver profile",
        )

    @app.route(route="caregivers/me", methods=["PATCH"], auth_level=func.AuthLevel.ANONYMOUS)
    async def update_my_caregiver_profile(req: func.HttpRequest) -> func.HttpResponse:
        """
        PATCH /api/caregivers/me
        Update bio, experience or hourly rate.
        """
        service = CaregiverService(container.gateway)
        return await pipeline.handle(
            req,
            lambda ctx: service.update_my_profile(ctx.subject_id, ctx.body),
            body=UpdateCaregiverPayload,
            action="update caregiver profile",
        )

    @app.route(route="caregivers/{caregiver_id}", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
    async def get_caregiver(req: func.HttpRequest) -> func.HttpResponse:
        """
        GET /api/caregivers/{caregiver_id}
        Get a caregiver's public profile.
        """
        service = CaregiverService(container.gateway)
        return await pipeline.handle(
            req,
            lambda ctx: service.get_public_profile(ctx.route_param("caregiver_id")),
            action="get caregiver",
        )
