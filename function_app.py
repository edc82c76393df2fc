"""
Care Marketplace BFF - Azure Functions Application

Backend-for-frontend for the care marketplace client. Authenticates callers
against Supabase Auth, checks row ownership and proxies reads, writes and
stored-procedure calls to the Supabase data API and storage.
"""

import logging

from shared.config import load_settings
from shared.container import build_container
from app_factory import create_function_app

settings = load_settings()

# Configure logging
logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))
logger = logging.getLogger(__name__)

container = build_container(settings)

# Create the main Function App instance
app = create_function_app(container)

logger.info(f"Function app started ({settings.environment})")
