"""
HTTP route handlers for care session endpoints.
"""

import azure.functions as func

from shared.container import ServiceContainer
from .schemas import (
    CheckInProposal, CheckOutPayload, CreateFromMatchPayload, ReviewPayload, SessionListQuery
)
from .service import SessionService, session_participant


def register_session_routes(app: func.FunctionApp, container: ServiceContainer):
    """Register all care session routes with the function app."""
    pipeline = container.pipeline

    def service() -> SessionService:
        return SessionService(container.gateway)

    @app.route(route="sessions/from-match", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
    async def create_session_from_match(req: func.HttpRequest) -> func.HttpResponse:
        """
        POST /api/sessions/from-match
        Create a session from an accepted match.
        """
        return await pipeline.handle(
            req,
            lambda ctx: service().create_from_match(ctx.subject_id, str(ctx.body.asignacion_id)),
            body=CreateFromMatchPayload,
            status_code=201,
            action="create session",
        )

    @app.route(route="sessions/{session_id}/check-in/propose", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
    async def propose_check_in(req: func.HttpRequest) -> func.HttpResponse:
        """
        POST /api/sessions/{session_id}/check-in/propose
        """
        return await pipeline.handle(
            req,
            lambda ctx: service().propose_check_in(
                ctx.subject_id, ctx.route_param("session_id"), ctx.body.notas
            ),
            body=CheckInProposal,
            action="propose check-in",
        )

    @app.route(route="sessions/{session_id}/check-in/confirm", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
    async def confirm_check_in(req: func.HttpRequest) -> func.HttpResponse:
        """
        POST /api/sessions/{session_id}/check-in/confirm
        """
        return await pipeline.handle(
            req,
            lambda ctx: service().confirm_check_in(ctx.subject_id, ctx.route_param("session_id")),
            action="confirm check-in",
        )

    @app.route(route="sessions/{session_id}/check-out/propose", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
    async def propose_check_out(req: func.HttpRequest) -> func.HttpResponse:
        """
        POST /api/sessions/{session_id}/check-out/propose
        """
        return await pipeline.handle(
            req,
            lambda ctx: service().propose_check_out(
                ctx.subject_id, ctx.route_param("session_id"), ctx.body.resumen
            ),
            body=CheckOutPayload,
            action="propose check-out",
        )

    @app.route(route="sessions/{session_id}/check-out/confirm", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
    async def confirm_check_out(req: func.HttpRequest) -> func.HttpResponse:
        """
        POST /api/sessions/{session_id}/check-out/confirm
        """
        return await pipeline.handle(
            req,
            lambda ctx: service().confirm_check_out(
                ctx.subject_id, ctx.route_param("session_id"), ctx.body.resumen
            ),
            body=CheckOutPayload,
            action="confirm check-out",
        )

    @app.route(route="sessions/{session_id}/reviews", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
    async def create_session_review(req: func.HttpRequest) -> func.HttpResponse:
        """
        POST /api/sessions/{session_id}/reviews
        Review the other participant of a session.
        """
        return await pipeline.handle(
            req,
            lambda ctx: service().create_review(ctx.subject_id, ctx.owned[0], ctx.body),
            checks=lambda ctx: [session_participant(ctx.route_param("session_id"))],
            body=ReviewPayload,
            status_code=201,
            action="create review",
        )

    @app.route(route="sessions/{session_id}", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
    async def get_session(req: func.HttpRequest) -> func.HttpResponse:
        """
        GET /api/sessions/{session_id}
        """
        return await pipeline.handle(
            req,
            lambda ctx: service().get(ctx.route_param("session_id")),
            checks=lambda ctx: [session_participant(ctx.route_param("session_id"))],
            action="get session",
        )

    @app.route(route="sessions", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
    async def list_my_sessions(req: func.HttpRequest) -> func.HttpResponse:
        """
        GET /api/sessions?rol=CUIDADOR|SOLICITANTE
        List the current user's sessions, newest first.
        """
        return await pipeline.handle(
            req,
            lambda ctx: service().list_mine(ctx.subject_id, ctx.query.rol),
            query=SessionListQuery,
            action="list sessions",
        )
