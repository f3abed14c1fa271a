"""Utility functions for application configuration management.

This module provides a standardized interface for Lambda functions to access
configuration data stored in **AWS AppConfig**. Each environment (`APP_ENV`) has
a dedicated AppConfig *Environment* within the shared AppConfig *Application*
identified by `APP_NAME`. Configuration data is stored as a JSON document under
a configuration profile (typically `backend-config`).

The configuration JSON follows this structure:

    {
        "build": 7,
        "active_backend": "redis",
        "service": {
            "domain": "sho.rt",
            "api_quota": 10,
            "quota_window_seconds": 1800,
            "default_expiry_hours": 24
        },
        "configs": {
            "shorten_url": {
                "redis": {"host": "...", "port": 6379, "codes_db": 0, "limits_db": 1}
            },
            "redirect_url": {
                "redis": { ... }
            }
        }
    }

Each Lambda loads its own section (e.g., `"shorten_url"`) plus the shared
`"service"` section. The `API_QUOTA`, `DOMAIN`, `QUOTA_WINDOW_SECONDS` and
`DEFAULT_EXPIRY_HOURS` environment variables override the `"service"` values.

Typical usage inside a Lambda handler:
    >>> from urlshortener.utils.config import load_config, ServiceSettings
    >>> app_config = load_config('shorten_url')
    >>> settings = ServiceSettings.from_config(app_config)
    >>> settings.api_quota
    10
"""

import os
import json
import functools
import urllib.parse
import urllib.request
import logging
from dataclasses import dataclass
from collections.abc import Callable

import boto3

from urlshortener.types import LambdaConfiguration
from urlshortener.constants import ENV, TTL, Defaults
from urlshortener.utils.helpers import require_environment
from urlshortener.utils.runtime import running_locally
from urlshortener.exceptions import BadConfigurationError


logger = logging.getLogger(__name__)


def app_env() -> str:
    return os.environ.get(ENV.App.APP_ENV, 'local').lower()


def app_name() -> str | None:
    return os.environ.get(ENV.App.APP_NAME)


def app_prefix() -> str | None:
    return None if app_name() is None else f'{app_name()}:{app_env()}'


def _lambda_section(document: dict, lambda_name: str) -> LambdaConfiguration:
    backend = document['active_backend']
    return {
        backend: document['configs'][lambda_name][backend],
        'service': document.get('service', {}),
    }


def _sam_load_local_appconfig(func: Callable) -> Callable:  # pragma: no cover
    """Decorator: load AppConfig from a local AppConfig Agent when running under SAM.

    Behavior:
        - If the application is running locally and `APPCONFIG_AGENT_URL` is set
          to a safe local URL, fetch the app configuration JSON from the local
          AppConfig agent.
        - Else, call the wrapped function (which pulls from AWS AppConfig via boto3).

    Environment variables used:
        APPCONFIG_AGENT_URL     : Base URL of the local AppConfig Agent (e.g., http://appconfig-agent:2772).
        APPCONFIG_PROFILE_NAME  : Optional profile name (default: "backend-config").
    """

    # ruff: noqa: E701
    def __validate_appconfig_url(url: str | None) -> str:
        if not url:
            return ''
        components = urllib.parse.urlparse(url)
        if components.scheme not in {'http', 'https'}:
            raise BadConfigurationError(f'Bad scheme {url}')
        if components.hostname not in {'localhost', '127.0.0.1', 'host.docker.internal', 'appconfig-agent'}:
            raise BadConfigurationError(f'Bad host {url}')
        if components.port not in {2772, None}:
            raise BadConfigurationError(f'Bad port {url}')
        return url

    # ruff: enable

    @functools.wraps(func)
    def wrapper(lambda_name: str) -> LambdaConfiguration:
        agent_url = __validate_appconfig_url(os.getenv(ENV.AppConfig.AGENT_URL))
        if not running_locally() or not agent_url:
            return func(lambda_name)

        profile_name = os.getenv(ENV.AppConfig.PROFILE_NAME, 'backend-config')
        url = f'{agent_url}/applications/{app_name()}/environments/{app_env()}/configurations/{profile_name}'

        logger.debug('Trying to load AppConfig from local agent.', extra={'agentUrl': url, 'lambdaName': lambda_name})
        with urllib.request.urlopen(url, timeout=5) as r:  # noqa: S310
            document = json.load(r)

        logger.debug('Loaded AppConfig from local agent.', extra={'lambdaName': lambda_name, 'build': document.get('build')})
        return _lambda_section(document, lambda_name)

    return wrapper


@_sam_load_local_appconfig
@require_environment(ENV.AppConfig.APP_ID, ENV.AppConfig.ENV_ID, ENV.AppConfig.PROFILE_ID)
def load_config(lambda_name: str) -> LambdaConfiguration:
    """Load configuration for a given Lambda from AWS AppConfig.

    Fetches the AppConfig JSON once and returns the section relevant
    to the requested Lambda function (e.g., 'shorten_url', 'redirect_url'),
    together with the shared 'service' section.

    Environment variables required:
        APPCONFIG_APP_ID       – AppConfig Application ID
        APPCONFIG_ENV_ID       – AppConfig Environment ID
        APPCONFIG_PROFILE_ID   – AppConfig Configuration Profile ID

    Returns:
        dict: e.g. {'redis': {...}, 'service': {...}}

    Raises:
        MissingEnvironmentVariableError:
            If any of the AppConfig identifiers is not set.
        botocore.exceptions.ClientError:
            If AppConfig rejects the request.
    """
    logger.debug('Trying to load AppConfig from AWS AppConfig.', extra={'lambdaName': lambda_name})

    appconfig = boto3.client('appconfigdata')

    # Start an AppConfig data session
    session_token = appconfig.start_configuration_session(
        ApplicationIdentifier=os.environ[ENV.AppConfig.APP_ID],
        EnvironmentIdentifier=os.environ[ENV.AppConfig.ENV_ID],
        ConfigurationProfileIdentifier=os.environ[ENV.AppConfig.PROFILE_ID],
    )['InitialConfigurationToken']

    # Fetch the configuration
    response = appconfig.get_latest_configuration(ConfigurationToken=session_token)
    content = response['Configuration'].read()
    document = json.loads(content.decode('utf-8'))

    logger.debug('Loaded AppConfig from AWS AppConfig.', extra={'lambdaName': lambda_name, 'build': document.get('build')})
    return _lambda_section(document, lambda_name)


def _positive_int(name: str, value) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as e:
        raise BadConfigurationError(f'{name} must be an integer (given value: {value!r}).') from e
    if number <= 0:
        raise BadConfigurationError(f'{name} must be positive (given value: {number}).')
    return number


@dataclass(frozen=True)
class ServiceSettings:
    """Service-level settings shared by all Lambdas.

    Attributes:
        domain (str | None):
            The service's own public domain; used to build short URLs and to
            reject URLs pointing back at the service.
        api_quota (int):
            Shorten requests granted per client per quota window.
        quota_window_seconds (int):
            Length of the fixed per-client quota window.
        default_expiry_hours (int):
            Short URL lifetime when a request doesn't ask for one.
    """

    domain: str | None = None
    api_quota: int = Defaults.API_QUOTA
    quota_window_seconds: int = TTL.QUOTA_WINDOW
    default_expiry_hours: int = Defaults.EXPIRY_HOURS

    @classmethod
    def from_config(cls, app_config: LambdaConfiguration) -> 'ServiceSettings':
        """Build settings from a loaded config, applying environment overrides.

        Raises:
            BadConfigurationError:
                If a numeric setting is not a positive integer.
        """
        service = dict(app_config.get('service') or {})

        domain = os.environ.get(ENV.Service.DOMAIN) or service.get('domain') or None
        api_quota = os.environ.get(ENV.Service.API_QUOTA) or service.get('api_quota', Defaults.API_QUOTA)
        window = os.environ.get(ENV.Service.QUOTA_WINDOW_SECONDS) or service.get('quota_window_seconds', TTL.QUOTA_WINDOW)
        expiry = os.environ.get(ENV.Service.DEFAULT_EXPIRY_HOURS) or service.get('default_expiry_hours', Defaults.EXPIRY_HOURS)

        return cls(
            domain=domain,
            api_quota=_positive_int('api_quota', api_quota),
            quota_window_seconds=_positive_int('quota_window_seconds', window),
            default_expiry_hours=_positive_int('default_expiry_hours', expiry),
        )

