import sys

from loguru import logger

from stargallery.api import create_app
from stargallery.config import settings
from stargallery.permissions.consent import ConsentPermissionService
from stargallery.platforms.capabilities import resolve_capabilities
from stargallery.wiring import build_channel

logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])

capabilities = resolve_capabilities(settings.platform, settings.sdk_version)
logger.info(f"Starting image saver for {settings.platform} {settings.sdk_version}: {capabilities}")

permissions = ConsentPermissionService(
    status=settings.initial_permission_status,
    reprompt_after_denial=capabilities.reprompts_after_denial,
)
channel = build_channel(settings=settings, capabilities=capabilities, permissions=permissions)
app = create_app(channel=channel, permissions=permissions)
