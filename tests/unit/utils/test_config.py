"""Unit tests for configuration utilities in config.py

Test coverage includes:

1. Environment variable resolution
   - Ensures app_env(), app_name(), app_prefix() correctly read environment variables.

2. Configuration loading behavior
   - Ensures load_config() returns the lambda's backend section and the shared service section.
   - Ensures load_config() raises ClientError when AppConfig calls fail.
   - Ensures load_config() requires the AppConfig identifiers.

3. Service settings
   - Ensures defaults apply when the service section is missing.
   - Ensures environment variables override the service section.
   - Confirms non-positive or non-numeric values raise BadConfigurationError.
"""

import os
import json
from io import BytesIO
from unittest.mock import MagicMock

import pytest
import botocore

from urlshortener.utils import config
from urlshortener.exceptions import BadConfigurationError, MissingEnvironmentVariableError


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture(autouse=True)
def _env(monkeypatch):
    """Set up environment variables for testing."""
    monkeypatch.setenv('APP_ENV', 'test')
    monkeypatch.setenv('APPCONFIG_APP_ID', 'app123')
    monkeypatch.setenv('APPCONFIG_ENV_ID', 'env123')
    monkeypatch.setenv('APPCONFIG_PROFILE_ID', 'prof123')
    monkeypatch.delenv('APPCONFIG_AGENT_URL', raising=False)
    monkeypatch.delenv('AWS_SAM_LOCAL', raising=False)
    for name in ('API_QUOTA', 'DOMAIN', 'QUOTA_WINDOW_SECONDS', 'DEFAULT_EXPIRY_HOURS'):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def appconfig_payload():
    """Provide a default AppConfig payload used by multiple tests."""
    # fmt: off
    return {
        'build': 42,
        'active_backend': 'redis',
        'service': {
            'domain': 'sho.rt',
            'api_quota': 5,
            'quota_window_seconds': 600,
            'default_expiry_hours': 12,
        },
        'configs': {
            'test_lambda': {
                'redis': {
                    'host': 'monkey',
                    'port': 6380,
                    'codes_db': 3,
                    'limits_db': 4,
                }
            }
        },
    }
    # fmt: on


@pytest.fixture
def appconfig_client(monkeypatch, appconfig_payload):
    """Mock the AppConfig Data client returned by boto3.client()."""
    client = MagicMock()
    client.start_configuration_session.return_value = {'InitialConfigurationToken': 'monkey_token'}
    client.get_latest_configuration.return_value = {'Configuration': BytesIO(json.dumps(appconfig_payload).encode('utf-8'))}
    monkeypatch.setattr(config.boto3, 'client', lambda service: client)
    return client


# -------------------------------
# 1. Environment variable resolution
# -------------------------------


def test_app_env(monkeypatch):
    """Ensure app_env() returns the lowercased value of APP_ENV"""
    monkeypatch.setitem(os.environ, 'APP_ENV', 'Dev')
    assert config.app_env() == 'dev'


def test_app_env_default(monkeypatch):
    """Ensure app_env() falls back to 'local'"""
    monkeypatch.delitem(os.environ, 'APP_ENV', raising=False)
    assert config.app_env() == 'local'


def test_app_name(monkeypatch):
    """Ensure app_name() returns the correct environment value from APP_NAME"""
    monkeypatch.setitem(os.environ, 'APP_NAME', 'test-app')
    assert config.app_name() == 'test-app'


def test_app_name_not_set(monkeypatch):
    """Ensure app_name() returns None when APP_NAME is not set"""
    monkeypatch.delitem(os.environ, 'APP_NAME', raising=False)
    assert config.app_name() is None


def test_app_prefix(monkeypatch):
    """Ensure app_prefix() combines APP_NAME and APP_ENV"""
    monkeypatch.setitem(os.environ, 'APP_NAME', 'test-app')
    monkeypatch.setitem(os.environ, 'APP_ENV', 'test')
    assert config.app_prefix() == 'test-app:test'


def test_app_prefix_without_app_name(monkeypatch):
    """Ensure keys stay unprefixed when APP_NAME is not set"""
    monkeypatch.delitem(os.environ, 'APP_NAME', raising=False)
    assert config.app_prefix() is None


# -------------------------------
# 2. Configuration loading behavior
# -------------------------------


def test_load_config(appconfig_client):
    """Ensure load_config() returns the lambda's backend config and the service section."""
    result = config.load_config('test_lambda')

    assert result == {
        'redis': {'host': 'monkey', 'port': 6380, 'codes_db': 3, 'limits_db': 4},
        'service': {'domain': 'sho.rt', 'api_quota': 5, 'quota_window_seconds': 600, 'default_expiry_hours': 12},
    }
    appconfig_client.start_configuration_session.assert_called_once_with(
        ApplicationIdentifier='app123',
        EnvironmentIdentifier='env123',
        ConfigurationProfileIdentifier='prof123',
    )
    appconfig_client.get_latest_configuration.assert_called_once_with(ConfigurationToken='monkey_token')


def test_load_config_without_service_section(appconfig_client, appconfig_payload):
    """Ensure a document without a service section yields an empty one."""
    del appconfig_payload['service']
    appconfig_client.get_latest_configuration.return_value = {'Configuration': BytesIO(json.dumps(appconfig_payload).encode('utf-8'))}

    assert config.load_config('test_lambda')['service'] == {}


def test_missing_appconfig_raises_error(monkeypatch):
    """Ensure load_config() propagates ClientError when AppConfig returns an error."""
    mock_appconfig = MagicMock()
    mock_appconfig.start_configuration_session.side_effect = botocore.exceptions.ClientError(
        {'Error': {'Code': 'ResourceNotFoundException'}}, 'StartConfigurationSession'
    )
    monkeypatch.setattr(config.boto3, 'client', lambda service: mock_appconfig)

    with pytest.raises(botocore.exceptions.ClientError):
        config.load_config('test_lambda')


def test_load_config_requires_appconfig_ids(monkeypatch, appconfig_client):
    """Ensure load_config() refuses to run without AppConfig identifiers."""
    monkeypatch.delenv('APPCONFIG_PROFILE_ID')

    with pytest.raises(MissingEnvironmentVariableError, match="'APPCONFIG_PROFILE_ID'"):
        config.load_config('test_lambda')
    appconfig_client.start_configuration_session.assert_not_called()


# -------------------------------
# 3. Service settings
# -------------------------------


def test_service_settings_defaults():
    """Ensure defaults apply when the service section is missing."""
    settings = config.ServiceSettings.from_config({'redis': {}})

    assert settings == config.ServiceSettings(domain=None, api_quota=10, quota_window_seconds=1800, default_expiry_hours=24)


def test_service_settings_from_config(appconfig_payload):
    """Ensure values are read from the service section."""
    settings = config.ServiceSettings.from_config({'service': appconfig_payload['service']})

    assert settings.domain == 'sho.rt'
    assert settings.api_quota == 5
    assert settings.quota_window_seconds == 600
    assert settings.default_expiry_hours == 12


def test_service_settings_environment_overrides(monkeypatch, appconfig_payload):
    """Ensure environment variables take precedence over the service section."""
    monkeypatch.setenv('API_QUOTA', '3')
    monkeypatch.setenv('DOMAIN', 'short.example')
    monkeypatch.setenv('QUOTA_WINDOW_SECONDS', '60')
    monkeypatch.setenv('DEFAULT_EXPIRY_HOURS', '48')

    settings = config.ServiceSettings.from_config({'service': appconfig_payload['service']})

    assert settings == config.ServiceSettings(domain='short.example', api_quota=3, quota_window_seconds=60, default_expiry_hours=48)


@pytest.mark.parametrize(
    'name, value',
    [
        ('API_QUOTA', '0'),
        ('API_QUOTA', 'ten'),
        ('QUOTA_WINDOW_SECONDS', '-5'),
        ('DEFAULT_EXPIRY_HOURS', '1.5'),
    ],
)
def test_service_settings_with_bad_values(monkeypatch, name, value):
    """Ensure invalid numeric settings raise BadConfigurationError."""
    monkeypatch.setenv(name, value)

    with pytest.raises(BadConfigurationError):
        config.ServiceSettings.from_config({})

