"""
HTTP route handlers for profile endpoints.
"""

import azure.functions as func

from shared.container import ServiceContainer
from .schemas import UpdateProfilePayload
from .service import ProfileService


def register_profile_routes(app: func.FunctionApp, container: ServiceContainer):
    """Register all profile-related routes with the function app."""
    pipeline = container.pipeline

    @app.route(route="profile/me", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
    async def get_my_profile(req: func.HttpRequest) -> func.HttpResponse:
        """
        GET /api/profile/me
        Get the current user's profile.
        """
        service = ProfileService(container.gateway)
        return await pipeline.handle(
            req,
            lambda ctx: service.get_profile(ctx.identity),
            action="get profile",
        )

    @app.route(route="profile/me", methods=["PATCH"], auth_level=func.AuthLevel.ANONYMOUS)
    async def update_my_profile(req: func.HttpRequest) -> func.HttpResponse:
        """
        PATCH /api/profile/me
        Update the current user's profile.
        """
        service = ProfileService(container.gateway)
        return await pipeline.handle(
            req,
            lambda ctx: service.update_profile(ctx.identity, ctx.body),
            body=UpdateProfilePayload,
            action="update profile",
        )

    @app.route(route="users/{user_id}", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
    async def get_public_user(req: func.HttpRequest) -> func.HttpResponse:
        """
        GET /api/users/{user_id}
        Get another user's public profile.
        """
        service = ProfileService(container.gateway)
        return await pipeline.handle(
            req,
            lambda ctx: service.get_public_profile(ctx.route_param("user_id")),
            action="get user",
        )
