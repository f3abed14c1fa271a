import json
import base64
import logging
import binascii

from botocore.exceptions import BotoCoreError, ClientError

from urlshortener.types import LambdaEvent, LambdaContext, LambdaResponse
from urlshortener.models import ShortenRequest
from urlshortener.service import ShortenerService
from urlshortener.dao.redis import ShortURLRedisDAO, RateLimitRedisDAO
from urlshortener.dao.exceptions import DataStoreError, QuotaExceededError
from urlshortener.exceptions import (
    ConfigurationError,
    MissingClientIDError,
    InvalidURLError,
    DomainRejectedError,
    InvalidAliasError,
    InvalidExpiryError,
    AliasInUseError,
)
from urlshortener.utils import (
    load_config,
    app_prefix,
    get_short_url,
    get_client_id,
    guarantee_500_response,
    ServiceSettings,
)
from urlshortener.lambdas.responses import response_200, response_400, response_429, response_500
from urlshortener.lambdas.shorten_url.constants import (
    INVALID_JSON,
    MISSING_URL,
    MISSING_CLIENT_ID,
    INVALID_URL,
    DOMAIN_REJECTED,
    INVALID_ALIAS,
    INVALID_EXPIRY,
    ALIAS_IN_USE,
    RATE_LIMIT_EXCEEDED,
    SHORTEN_SUCCESS,
)


logger = logging.getLogger(__name__)

# Client errors raised by ShortenerService.shorten(), answered with 400
BAD_REQUEST_ERRORS = {
    MissingClientIDError: MISSING_CLIENT_ID,
    InvalidURLError: INVALID_URL,
    DomainRejectedError: DOMAIN_REJECTED,
    InvalidAliasError: INVALID_ALIAS,
    InvalidExpiryError: INVALID_EXPIRY,
    AliasInUseError: ALIAS_IN_USE,
}


def parse_body(event: LambdaEvent) -> dict:
    """Decode the JSON request body of an API Gateway event.

    Raises:
        ValueError: If the body is not a JSON object.
    """
    raw = event.get('body') or '{}'
    if event.get('isBase64Encoded'):
        try:
            raw = base64.b64decode(raw).decode('utf-8')
        except (binascii.Error, UnicodeDecodeError) as e:
            raise ValueError('Body is not valid base64-encoded UTF-8.') from e

    body = json.loads(raw)  # json.JSONDecodeError is a ValueError
    if not isinstance(body, dict):
        raise ValueError('Body must be a JSON object.')
    return body


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests to shorten URLs

    This Lambda handler follows this procedure to shorten URLs:
    - Step 1: Load the application's config
    - Step 2: Extract the client's address from the event
    - Step 3: Extract url, short and expiry from request body
    - Step 4: Shorten the URL (quota check, validation, storage)
    - Step 5: Respond to client with 200 success

    HTTP responses:
        200: Successful URL shortening
            url: normalized original url
            short: newly generated short url
            expiry: lifetime of the short url in hours
            rate_limit: requests left in the client's quota window
            rate_limit_reset: minutes until the quota window resets
        400: Bad client request
            error: invalid JSON, missing url, invalid url, own domain,
                   invalid alias or expiry, alias already in use, or
                   missing client address
        429: Too many shorten requests
            error: client quota reached, Retry-After header set
        500: Internal server error
            error: the server experienced an internal error

    Args:
        event (LambdaEvent):
            API Gateway event payload in Lambda Proxy format.
        context (LambdaContext):
            AWS Lambda context object containing runtime information.

    Returns:
        LambdaResponse:
            JSON-serializable response following API Gateway Lambda Proxy
            output format. Includes status code, headers, and response body.

    Example:
        >>> event = {'body': '{"url": "http://example.com"}', 'requestContext': {'identity': {'sourceIp': '203.0.113.7'}}}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        200
        >>> json.loads(response['body'])['url']
        'https://example.com'
    """
    # 1- Get application's config
    try:
        app_config = load_config('shorten_url')
        settings = ServiceSettings.from_config(app_config)
    except (ConfigurationError, BotoCoreError, ClientError):
        logger.exception('Failed to load AppConfig for shorten URL function. Responding with 500.')
        return response_500()

    # 2- Extract client address
    client_id = get_client_id(event)

    # 3- Extract shorten request from body
    try:
        body = parse_body(event)
    except ValueError:
        logger.info('Invalid JSON body. Responding with 400.', extra={'event': INVALID_JSON})
        return response_400(message='invalid JSON body', error_code=INVALID_JSON)

    original_url = body.get('url')
    if not original_url or not isinstance(original_url, str):
        logger.info("Missing 'url' in body. Responding with 400.", extra={'event': MISSING_URL})
        return response_400(message="missing 'url' in JSON body", error_code=MISSING_URL)

    request = ShortenRequest(
        original_url=original_url,
        custom_alias=body.get('short') or None,
        expiry_hours=body.get('expiry'),
    )

    # 4- Shorten the URL
    try:
        service = ShortenerService(
            short_url_dao=ShortURLRedisDAO(app_config.get('redis'), prefix=app_prefix()),
            # fmt: off
            rate_limit_dao=RateLimitRedisDAO(app_config.get('redis'),
                                             prefix=app_prefix(),
                                             quota=settings.api_quota,
                                             window_seconds=settings.quota_window_seconds),
            # fmt: on
            domain=settings.domain,
            default_expiry_hours=settings.default_expiry_hours,
        )
        result = service.shorten(request, client_id=client_id)
    except QuotaExceededError as e:
        logger.info(
            'Client quota exceeded. Responding with 429.',
            extra={'clientId': client_id, 'event': RATE_LIMIT_EXCEEDED, 'resetSeconds': e.reset_seconds},
        )
        return response_429(
            retry_after=e.reset_seconds,
            error_code=RATE_LIMIT_EXCEEDED,
            message=f'Rate limit exceeded. Try again in {e.reset_minutes} minutes.',
        )
    except tuple(BAD_REQUEST_ERRORS) as e:
        error_code = BAD_REQUEST_ERRORS[type(e)]
        logger.info('Rejected shorten request. Responding with 400.', extra={'clientId': client_id, 'event': error_code})
        return response_400(message=str(e), error_code=error_code)
    except DataStoreError:
        logger.exception('Data store unavailable. Responding with 500.', extra={'clientId': client_id})
        return response_500()
    except ConfigurationError:
        logger.exception('Invalid Redis configuration for shorten URL function. Responding with 500.')
        return response_500()

    # 5- Return successful response to client
    short_url = get_short_url(result.shortcode, event, domain=settings.domain)
    logger.info(
        'Shortened URL. Responding with 200.',
        extra={'clientId': client_id, 'shortcode': result.shortcode, 'event': SHORTEN_SUCCESS},
    )
    return response_200(
        {
            'url': result.original_url,
            'short': short_url,
            'expiry': result.expiry_hours,
            'rate_limit': result.rate_remaining,
            'rate_limit_reset': result.rate_reset_minutes,
        }
    )
