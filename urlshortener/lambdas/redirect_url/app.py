import logging

from botocore.exceptions import BotoCoreError, ClientError

from urlshortener.types import LambdaEvent, LambdaContext, LambdaResponse
from urlshortener.service import ShortenerService
from urlshortener.dao.redis import ShortURLRedisDAO, StatsRedisDAO
from urlshortener.dao.exceptions import DataStoreError, ShortURLNotFoundError
from urlshortener.exceptions import ConfigurationError
from urlshortener.utils import load_config, app_prefix, get_short_url, guarantee_500_response
from urlshortener.lambdas.responses import response_307, response_400, response_404, response_500
from urlshortener.lambdas.redirect_url.constants import (
    MISSING_SHORTCODE,
    SHORT_URL_NOT_FOUND,
    REDIRECT_SUCCESS,
)


logger = logging.getLogger(__name__)


def stats_dao_or_none(app_config: dict) -> StatsRedisDAO | None:
    """Connect to the stats counter; redirects keep working without it."""
    try:
        return StatsRedisDAO(app_config.get('redis'), prefix=app_prefix())
    except DataStoreError:
        logger.warning('Stats data store unavailable. Resolution counter disabled for this request.', exc_info=True)
        return None


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests to redirect URLs

    This Lambda handler follows this procedure to redirect URLs:
    - Step 1: Load the application's config
    - Step 2: Extract shortcode from request path
    - Step 3: Resolve the shortcode to its target URL
    - Step 4: Redirect client to target URL

    HTTP responses:
        307: Successful redirect
            headers:
                Location: target URL destination
        400: Bad client request
            error: missing shortcode in path parameters
        404: Not found
            error: shortcode unknown or expired
        500: Internal server error
            error: server experienced an internal error

    Args:
        event (LambdaEvent):
            API Gateway event payload containing the shortcode path parameter.
        context (LambdaContext):
            AWS Lambda runtime context object (not used directly).

    Returns:
        LambdaResponse:
            API Gateway-compatible response including statusCode, headers, and body.

    Example:
        >>> event = {'pathParameters': {'shortcode': '3d7'}}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        307
        >>> response['headers']['Location']
        'https://example.com/my-page'
    """
    # 1- Get application's config
    try:
        app_config = load_config('redirect_url')
    except (ConfigurationError, BotoCoreError, ClientError):
        logger.exception('Failed to load AppConfig for redirect URL function. Responding with 500.')
        return response_500()

    # 2- Extract shortcode from request's path
    shortcode = (event.get('pathParameters') or {}).get('shortcode')
    if not shortcode:
        logger.info(
            'Missing "shortcode" in path. Responding with 400.',
            extra={'event': MISSING_SHORTCODE},
        )
        return response_400(message="missing 'shortcode' in path", error_code=MISSING_SHORTCODE)
    logger.debug('Client requested short URL %s.', get_short_url(shortcode, event))

    # 3- Resolve shortcode to target URL
    try:
        service = ShortenerService(
            short_url_dao=ShortURLRedisDAO(app_config.get('redis'), prefix=app_prefix()),
            rate_limit_dao=None,
            stats_dao=stats_dao_or_none(app_config),
        )
        target_url = service.resolve(shortcode)
    except ShortURLNotFoundError:
        logger.info(
            'Short URL record not found in database. Responding with 404.',
            extra={'shortcode': shortcode, 'event': SHORT_URL_NOT_FOUND},
        )
        return response_404(message=f"short url {get_short_url(shortcode, event)} doesn't exist", error_code=SHORT_URL_NOT_FOUND)
    except DataStoreError:
        logger.exception('Data store unavailable. Responding with 500.', extra={'shortcode': shortcode})
        return response_500()
    except ConfigurationError:
        logger.exception('Invalid Redis configuration for redirect URL function. Responding with 500.')
        return response_500()

    # 4- Redirect client to target URL
    logger.info(
        'Redirecting client to target URL. Responding with 307.',
        extra={'shortcode': shortcode, 'event': REDIRECT_SUCCESS},
    )
    return response_307(location=target_url)
