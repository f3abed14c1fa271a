"""API Gateway (Lambda proxy) response builders shared by the handlers.

Error responses carry `{"error": <message>, "errorCode": <code>}`.
"""

import json
from typing import Any

from urlshortener.types import HttpHeaders, LambdaResponse


JSON_HEADERS: HttpHeaders = {'Content-Type': 'application/json'}


def response(status_code: int, body: dict[str, Any], headers: HttpHeaders | None = None) -> LambdaResponse:
    return {
        'statusCode': status_code,
        'headers': {**JSON_HEADERS, **(headers or {})},
        'body': json.dumps(body),
    }


def error_response(status_code: int, message: str, error_code: str | None = None, **fields: Any) -> LambdaResponse:
    body = {'error': message}
    if error_code:
        body['errorCode'] = error_code
    body.update(fields)
    return response(status_code, body)


def response_200(body: dict[str, Any]) -> LambdaResponse:
    return response(200, body)


def response_307(*, location: str) -> LambdaResponse:
    return {
        'statusCode': 307,
        'headers': {'Location': location},
        'body': '',
    }


def response_400(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    base = 'Bad Request'
    return error_response(400, base if not message else f'{base} ({message})', error_code)


def response_404(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    base = 'Not Found'
    return error_response(404, base if not message else f'{base} ({message})', error_code)


def response_429(*, retry_after: int, message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    body = {'error': message or 'Too Many Requests', 'rate_limit_reset': retry_after // 60}
    if error_code:
        body['errorCode'] = error_code
    return response(429, body, headers={'Retry-After': str(retry_after)})


def response_500(message: str | None = None) -> LambdaResponse:
    base = 'Internal Server Error'
    return error_response(500, base if not message else f'{base} ({message})')
