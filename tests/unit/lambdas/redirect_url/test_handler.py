import json
from typing import cast
from unittest.mock import MagicMock

import pytest
from pytest import MonkeyPatch

from urlshortener.types import LambdaEvent, LambdaContext, LambdaConfiguration
from urlshortener.lambdas.redirect_url import app
from urlshortener.models import ShortURLModel
from urlshortener.dao.base import ShortURLBaseDAO, StatsBaseDAO
from urlshortener.dao.exceptions import DataStoreError, ShortURLNotFoundError
from urlshortener.exceptions import BadConfigurationError, MissingEnvironmentVariableError


@pytest.fixture
def successful_event_307() -> LambdaEvent:
    return cast(LambdaEvent, {
        'resource': '/{shortcode}',
        'pathParameters': {'shortcode': 'abc123'},
        'httpMethod': 'GET',
        'path': '/abc123',
        'requestContext': {'resourcePath': '/{shortcode}', 'httpMethod': 'GET', 'domainName': 'testhost:1000', 'stage': 'test'},
    })


@pytest.fixture
def bad_request_400() -> LambdaEvent:
    return cast(LambdaEvent, {
        'resource': '/{shortcode}',
        'pathParameters': {'invalid': 'path'},
        'httpMethod': 'GET',
        'path': '/abc123',
        'requestContext': {'resourcePath': '/{shortcode}', 'httpMethod': 'GET', 'domainName': 'testhost:1000', 'stage': 'test'},
    })


class TestRedirectUrlHandler:

    @pytest.fixture
    def context(self) -> LambdaContext:
        return cast(LambdaContext, {'function_name': 'redirect_url'})

    @pytest.fixture
    def config(self) -> LambdaConfiguration:
        return cast(LambdaConfiguration, {'redis': {'host': 'redis.test', 'port': 6379, 'codes_db': 0, 'limits_db': 1}, 'service': {}})

    @pytest.fixture
    def short_url_dao(self) -> ShortURLBaseDAO:
        dao = MagicMock(spec=ShortURLBaseDAO)
        dao.get.return_value = ShortURLModel(
            target='https://example.com/blog/chuck-norris-is-awesome',
            shortcode='abc123',
        )
        return dao

    @pytest.fixture
    def stats_dao(self) -> StatsBaseDAO:
        dao = MagicMock(spec=StatsBaseDAO)
        dao.increment.return_value = 42
        return dao

    @pytest.fixture(autouse=True)
    def setup(
        self,
        monkeypatch: MonkeyPatch,
        context: LambdaContext,
        config: LambdaConfiguration,
        short_url_dao: ShortURLBaseDAO,
        stats_dao: StatsBaseDAO,
    ) -> None:
        monkeypatch.setenv('APP_ENV', 'test')
        monkeypatch.delenv('APP_NAME', raising=False)
        monkeypatch.delenv('AWS_SAM_LOCAL', raising=False)

        # Patch Lambda dependencies
        self.short_url_dao_cls = MagicMock(return_value=short_url_dao)
        self.stats_dao_cls = MagicMock(return_value=stats_dao)
        monkeypatch.setattr(app, 'load_config', lambda *a, **kw: config)
        monkeypatch.setattr(app, 'ShortURLRedisDAO', self.short_url_dao_cls)
        monkeypatch.setattr(app, 'StatsRedisDAO', self.stats_dao_cls)

        self.context = context
        self.config = config
        self.short_url_dao = short_url_dao
        self.stats_dao = stats_dao

    def test_lambda_handler(self, successful_event_307: LambdaEvent) -> None:
        response = app.lambda_handler(successful_event_307, self.context)
        headers = response['headers']

        # Assert Lambda successfully redirects user to target URL
        assert response['statusCode'] == 307
        assert response['body'] == ''
        assert headers['Location'] == 'https://example.com/blog/chuck-norris-is-awesome'

        # Assert short URL was looked up and resolution counted
        self.short_url_dao.get.assert_called_once_with('abc123')
        self.stats_dao.increment.assert_called_once_with()

        # Assert both DAOs get the redis section (each picks its own keyspace database)
        self.short_url_dao_cls.assert_called_once_with(self.config['redis'], prefix=None)
        self.stats_dao_cls.assert_called_once_with(self.config['redis'], prefix=None)

    def test_lambda_handler_resolves_repeatedly(self, successful_event_307: LambdaEvent) -> None:
        responses = [app.lambda_handler(successful_event_307, self.context) for _ in range(3)]

        assert {r['headers']['Location'] for r in responses} == {'https://example.com/blog/chuck-norris-is-awesome'}
        assert self.stats_dao.increment.call_count == 3

    @pytest.mark.parametrize('path_parameters', [{'invalid': 'path'}, None, {'shortcode': ''}])
    def test_lambda_handler_with_invalid_path_parameters(self, bad_request_400: LambdaEvent, path_parameters: dict | None) -> None:
        bad_request_400['pathParameters'] = path_parameters

        response = app.lambda_handler(bad_request_400, self.context)
        body = json.loads(response['body'])

        assert response['statusCode'] == 400
        assert body['error'] == "Bad Request (missing 'shortcode' in path)"
        assert body['errorCode'] == 'MISSING_SHORTCODE'
        self.short_url_dao.get.assert_not_called()

    def test_lambda_handler_with_invalid_shortcode(self, successful_event_307: LambdaEvent) -> None:
        self.short_url_dao.get.side_effect = ShortURLNotFoundError("Short URL with code 'abc123' not found.")
        short_url = 'https://testhost:1000/abc123'

        response = app.lambda_handler(successful_event_307, self.context)
        body = json.loads(response['body'])

        assert response['statusCode'] == 404
        assert body['error'] == f"Not Found (short url {short_url} doesn't exist)"
        assert body['errorCode'] == 'SHORT_URL_NOT_FOUND'
        self.stats_dao.increment.assert_not_called()

    def test_lambda_handler_with_failing_stats(self, successful_event_307: LambdaEvent) -> None:
        self.stats_dao.increment.side_effect = DataStoreError("Can't connect to Redis at redis.test:6379/1.")

        response = app.lambda_handler(successful_event_307, self.context)

        assert response['statusCode'] == 307
        assert response['headers']['Location'] == 'https://example.com/blog/chuck-norris-is-awesome'

    def test_lambda_handler_with_unreachable_stats_store(self, successful_event_307: LambdaEvent) -> None:
        self.stats_dao_cls.side_effect = DataStoreError("Can't connect to Redis at redis.test:6379/1.")

        response = app.lambda_handler(successful_event_307, self.context)

        assert response['statusCode'] == 307
        self.stats_dao.increment.assert_not_called()

    def test_lambda_handler_with_unreachable_data_store(self, successful_event_307: LambdaEvent) -> None:
        self.short_url_dao.get.side_effect = DataStoreError("Can't connect to Redis at redis.test:6379/0.")

        response = app.lambda_handler(successful_event_307, self.context)
        body = json.loads(response['body'])

        assert response['statusCode'] == 500
        assert body == {'error': 'Internal Server Error'}

    def test_lambda_handler_with_bad_redis_configuration(self, successful_event_307: LambdaEvent) -> None:
        self.short_url_dao_cls.side_effect = BadConfigurationError("Missing 'redis' section in configuration.")

        response = app.lambda_handler(successful_event_307, self.context)
        body = json.loads(response['body'])

        assert response['statusCode'] == 500
        assert body == {'error': 'Internal Server Error'}

    def test_lambda_handler_with_invalid_configuration(
        self,
        monkeypatch: MonkeyPatch,
        successful_event_307: LambdaEvent,
    ) -> None:
        mock_load_config = MagicMock(side_effect=MissingEnvironmentVariableError("Missing required environment variables: 'APPCONFIG_ENV_ID'"))
        monkeypatch.setattr(app, 'load_config', mock_load_config)

        response = app.lambda_handler(successful_event_307, self.context)
        body = json.loads(response['body'])

        assert response['statusCode'] == 500
        assert body['error'] == 'Internal Server Error'
        self.short_url_dao_cls.assert_not_called()
