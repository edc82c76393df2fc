"""
HTTP route handlers for storage endpoints.
"""

import azure.functions as func

from shared.container import ServiceContainer
from shared.permissions import owned_by
from sessions.service import session_participant
from .schemas import SignAvatarUploadQuery, SignedUrlQuery
from .service import (
    UploadService, form_value, parse_subject_index, read_upload, required_form_value
)


def register_upload_routes(app: func.FunctionApp, container: ServiceContainer):
    """Register all storage routes with the function app."""
    pipeline = container.pipeline

    def service() -> UploadService:
        return UploadService(
            container.storage,
            container.gateway,
            container.settings.signed_url_expires_in,
        )

    @app.route(route="storage/avatar", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
    async def upload_avatar(req: func.HttpRequest) -> func.HttpResponse:
        """
        POST /api/storage/avatar
        Upload the current user's avatar (multipart/form-data, field `file`).
        """
        return await pipeline.handle(
            req,
            lambda ctx: service().upload_avatar(ctx.subject_id, read_upload(ctx.request)),
            status_code=201,
            action="upload avatar",
        )

    @app.route(route="storage/request-image", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
    async def upload_request_image(req: func.HttpRequest) -> func.HttpResponse:
        """
        POST /api/storage/request-image
        Upload an image for one of the current user's service requests.
        Form fields: file, requestId, sujetoIndex (optional).
        """
        return await pipeline.handle(
            req,
            lambda ctx: service().upload_request_image(
                ctx.owned[0]["id"],
                read_upload(ctx.request),
                parse_subject_index(form_value(ctx.request, "sujetoIndex")),
            ),
            checks=lambda ctx: [
                owned_by(
                    "solicitudes",
                    required_form_value(ctx.request, "requestId"),
                    "usuario_id",
                    "Service request",
                )
            ],
            status_code=201,
            action="upload request image",
        )

    @app.route(route="storage/session-image", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
    async def upload_session_image(req: func.HttpRequest) -> func.HttpResponse:
        """
        POST /api/storage/session-image
        Upload an image for a care session. `sessionId` comes from the form or query.
        """
        return await pipeline.handle(
            req,
            lambda ctx: service().upload_session_image(ctx.owned[0]["id"], read_upload(ctx.request)),
            checks=lambda ctx: [
                session_participant(required_form_value(ctx.request, "sessionId"))
            ],
            status_code=201,
            action="upload session image",
        )

    @app.route(route="storage/sign-avatar-upload", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
    async def sign_avatar_upload(req: func.HttpRequest) -> func.HttpResponse:
        """
        GET /api/storage/sign-avatar-upload?filename=photo.png
        """
        return await pipeline.handle(
            req,
            lambda ctx: service().sign_avatar_upload(ctx.subject_id, ctx.query.filename),
            query=SignAvatarUploadQuery,
            action="sign avatar upload",
        )

    @app.route(route="storage/signed-url", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
    async def get_signed_url(req: func.HttpRequest) -> func.HttpResponse:
        """
        GET /api/storage/signed-url?bucket=avatars&path=...
        Get a time-limited URL for a stored object.
        """
        return await pipeline.handle(
            req,
            lambda ctx: service().signed_url(ctx.query.bucket, ctx.query.path),
            query=SignedUrlQuery,
            action="create signed URL",
        )
