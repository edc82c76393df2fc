"""
HTTP route handlers for account endpoints.
"""

import azure.functions as func

from shared.container import ServiceContainer
from .schemas import DeactivatePayload, LoginPayload, RegisterPayload, UpdateAccountPayload
from .service import AccountService


def register_account_routes(app: func.FunctionApp, container: ServiceContainer):
    """Register all account-related routes with the function app."""
    pipeline = container.pipeline

    def service() -> AccountService:
        return AccountService(container.gateway, container.identity)

    @app.route(route="auth/register", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
    async def register_account(req: func.HttpRequest) -> func.HttpResponse:
        """
        POST /api/auth/register
        Create an account and its profile, then sign in.
        """
        return await pipeline.handle(
            req,
            lambda ctx: service().register(ctx.body),
            body=RegisterPayload,
            public=True,
            status_code=201,
            action="register account",
        )

    @app.route(route="auth/login", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
    async def login(req: func.HttpRequest) -> func.HttpResponse:
        """
        POST /api/auth/login
        Exchange email and password for a session.
        """
        return await pipeline.handle(
            req,
            lambda ctx: service().login(ctx.body),
            body=LoginPayload,
            public=True,
            action="sign in",
        )

    @app.route(route="auth/me", methods=["PUT"], auth_level=func.AuthLevel.ANONYMOUS)
    async def update_account(req: func.HttpRequest) -> func.HttpResponse:
        """
        PUT /api/auth/me
        Update credentials and profile fields of the current user.
        """
        return await pipeline.handle(
            req,
            lambda ctx: service().update_account(ctx.identity, ctx.body),
            body=UpdateAccountPayload,
            action="update account",
        )

    @app.route(route="auth/me/deactivate", methods=["PUT"], auth_level=func.AuthLevel.ANONYMOUS)
    async def deactivate_account(req: func.HttpRequest) -> func.HttpResponse:
        """
        PUT /api/auth/me/deactivate
        Deactivate the current user's account.
        """
        return await pipeline.handle(
            req,
            lambda ctx: service().deactivate(ctx.identity, ctx.body),
            body=DeactivatePayload,
            action="deactivate account",
        )

    @app.route(route="auth/me/reactivate", methods=["PUT"], auth_level=func.AuthLevel.ANONYMOUS)
    async def reactivate_account(req: func.HttpRequest) -> func.HttpResponse:
        """
        PUT /api/auth/me/reactivate
        Reactivate the current user's account.
        """
        return await pipeline.handle(
            req,
            lambda ctx: service().reactivate(ctx.identity),
            action="reactivate account",
        )
