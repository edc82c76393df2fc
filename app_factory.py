"""
Builds the Function App and registers every route group.
"""

import datetime
import logging
import azure.functions as func

from shared.container import ServiceContainer
from shared.responses import success_response
from accounts.routes import register_account_routes
from profiles.routes import register_profile_routes
from caregivers.routes import register_caregiver_routes
from service_requests.routes import register_service_request_routes
from applications.routes import register_application_routes
from sessions.routes import register_session_routes
from uploads.routes import register_upload_routes

logger = logging.getLogger(__name__)

SERVICE_NAME = "Care Marketplace BFF"
SERVICE_VERSION = "1.0.0"


def register_health_route(app: func.FunctionApp, container: ServiceContainer):

    @app.route(route="health", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
    def health_check(req: func.HttpRequest) -> func.HttpResponse:
        """Health check endpoint to verify the Azure Function is running."""
        logger.info("Health check endpoint called.")

        return success_response({
            "status": "healthy",
            "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "environment": container.settings.environment,
        })


def create_function_app(container: ServiceContainer) -> func.FunctionApp:
    """Create the Function App with all routes bound to the given container."""
    app = func.FunctionApp(http_auth_level=func.AuthLevel.ANONYMOUS)

    register_health_route(app, container)
    register_account_routes(app, container)
    register_profile_routes(app, container)
    register_caregiver_routes(app, container)
    register_service_request_routes(app, container)
    register_application_routes(app, container)
    register_session_routes(app, container)
    register_upload_routes(app, container)

    return app
