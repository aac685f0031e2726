from edgeshortener.utils.config import app_env, app_name, app_prefix, load_config, load_settings, Settings
from edgeshortener.utils.helpers import base_url, require_environment, guarantee_500_response
from edgeshortener.utils.shortener import generate_shortcode
from edgeshortener.utils.logging import initialize_logging
from edgeshortener.utils.background import BackgroundTasks


__all__ = [
    'generate_shortcode',
    'app_env',
    'app_name',
    'app_prefix',
    'load_config',
    'load_settings',
    'Settings',
    'base_url',
    'require_environment',
    'guarantee_500_response',
    'initialize_logging',
    'BackgroundTasks',
]
