"""
HTTP route handlers for service request endpoints.
"""

import azure.functions as func

from shared.container import ServiceContainer
from shared.permissions import owned_by
from .schemas import (
    CreateChildrenRequest, CreateGrandparentsRequest, CreatePetsRequest, ListMineQuery,
    MyRequestsQuery, OpenRequestsQuery
)
from .service import ServiceRequestService, strip_other_categories


def register_service_request_routes(app: func.FunctionApp, container: ServiceContainer):
    """Register all service-request routes with the function app."""
    pipeline = container.pipeline

    def service() -> ServiceRequestService:
        return ServiceRequestService(container.gateway)

    @app.route(route="service-requests/grandparents", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
    async def create_grandparents_request(req: func.HttpRequest) -> func.HttpResponse:
        """
        POST /api/service-requests/grandparents
        Create an elderly-care request with up to three people.
        """
        return await pipeline.handle(
            req,
            lambda ctx: service().create_grandparents(ctx.subject_id, ctx.body.base, ctx.body.payload),
            body=CreateGrandparentsRequest,
            status_code=201,
            action="create service request",
        )

    @app.route(route="service-requests/children", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
    async def create_children_request(req: func.HttpRequest) -> func.HttpResponse:
        """
        POST /api/service-requests/children
        Create a childcare request with up to three children.
        """
        return await pipeline.handle(
            req,
            lambda ctx: service().create_children(ctx.subject_id, ctx.body.base, ctx.body.payload),
            body=CreateChildrenRequest,
            status_code=201,
            action="create service request",
        )

    @app.route(route="service-requests/pets", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
    async def create_pets_request(req: func.HttpRequest) -> func.HttpResponse:
        """
        POST /api/service-requests/pets
        Create a pet-care request with up to three animals.
        """
        return await pipeline.handle(
            req,
            lambda ctx: service().create_pets(ctx.subject_id, ctx.body.base, ctx.body.payload),
            body=CreatePetsRequest,
            status_code=201,
            action="create service request",
        )

    @app.route(route="service-requests", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
    async def list_my_requests(req: func.HttpRequest) -> func.HttpResponse:
        """
        GET /api/service-requests?type=ABUELOS|NINIOS|MASCOTAS
        List the current user's requests.
        """
        return await pipeline.handle(
            req,
            lambda ctx: service().list_mine(ctx.subject_id, ctx.query.type),
            query=ListMineQuery,
            action="list service requests",
        )

    @app.route(route="service-requests/open", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
    async def list_open_requests(req: func.HttpRequest) -> func.HttpResponse:
        """
        GET /api/service-requests/open?page=1&limit=10&fecha=YYYY-MM-DD
        List open requests matching the caregiver's service types.
        """
        return await pipeline.handle(
            req,
            lambda ctx: service().list_open_for_caregiver(ctx.subject_id, ctx.query),
            query=OpenRequestsQuery,
            action="list open service requests",
        )

    @app.route(route="service-requests/mine", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
    async def list_my_requests_paged(req: func.HttpRequest) -> func.HttpResponse:
        """
        GET /api/service-requests/mine?estado=&page=1&limit=10
        """
        return await pipeline.handle(
            req,
            lambda ctx: service().list_mine_paged(ctx.subject_id, ctx.query),
            query=MyRequestsQuery,
            action="list service requests",
        )

    @app.route(route="service-requests/mine/by-status", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
    async def list_my_requests_by_status(req: func.HttpRequest) -> func.HttpResponse:
        """
        GET /api/service-requests/mine/by-status
        """
        return await pipeline.handle(
            req,
            lambda ctx: service().list_mine_by_status(ctx.subject_id),
            action="group service requests",
        )

    @app.route(route="service-requests/{request_id}", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
    async def get_request(req: func.HttpRequest) -> func.HttpResponse:
        """
        GET /api/service-requests/{request_id}
        Get a request with the sub-resources of its category.
        """
        return await pipeline.handle(
            req,
            lambda ctx: service().get_by_id(ctx.route_param("request_id")),
            shape=strip_other_categories,
            action="get service request",
        )

    @app.route(route="service-requests/{request_id}", methods=["DELETE"], auth_level=func.AuthLevel.ANONYMOUS)
    async def cancel_request(req: func.HttpRequest) -> func.HttpResponse:
        """
        DELETE /api/service-requests/{request_id}
        Cancel one of the current user's requests.
        """
        return await pipeline.handle(
            req,
            lambda ctx: service().cancel(ctx.route_param("request_id")),
            checks=lambda ctx: [
                owned_by("solicitudes", ctx.route_param("request_id"), "usuario_id", "Service request")
            ],
            action="cancel service request",
        )
