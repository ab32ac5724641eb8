from rpgmaker_decoder.config import get_settings
from rpgmaker_decoder.services.header_engine import get_header_engine



def get_engine():
    """Dependency to get the header transform engine (config-driven)."""
    return get_header_engine()


def get_asset_service():
    """Dependency to get the asset service."""
    from rpgmaker_decoder.services.asset_service import asset_service
    return asset_service


def get_app_settings():
    """Dependency to get application settings."""
    return get_settings()
