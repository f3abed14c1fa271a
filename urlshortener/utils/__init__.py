from urlshortener.utils.config import app_env, app_name, app_prefix, load_config, ServiceSettings
from urlshortener.utils.helpers import base_url, get_short_url, get_client_id, require_environment, guarantee_500_response
from urlshortener.utils.shortener import base62_encode, generate_shortcode
from urlshortener.utils.validators import validate_url, validate_alias, validate_expiry
from urlshortener.utils.logging import initialize_logging, log_service_call


__all__ = [
    'base62_encode',
    'generate_shortcode',
    'validate_url',
    'validate_alias',
    'validate_expiry',
    'app_env',
    'app_name',
    'app_prefix',
    'load_config',
    'ServiceSettings',
    'base_url',
    'get_short_url',
    'get_client_id',
    'require_environment',
    'guarantee_500_response',
    'initialize_logging',
    'log_service_call',
]
