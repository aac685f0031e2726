import json
from typing import Any

from edgeshortener.types import LambdaResponse
from edgeshortener.constants import DenyReason
from edgeshortener.exceptions import HTTPError


JSON_HEADERS = {'Content-Type': 'application/json'}
HTML_HEADERS = {'Content-Type': 'text/html; charset=utf-8'}


def json_response(status: int, body: Any, headers: dict[str, str] | None = None) -> LambdaResponse:
    return {
        'statusCode': status,
        'headers': {**JSON_HEADERS, **(headers or {})},
        'body': json.dumps(body),
    }


def html_response(html: str, status: int = 200) -> LambdaResponse:
    return {
        'statusCode': status,
        'headers': dict(HTML_HEADERS),
        'body': html,
    }


def response_200(body: Any) -> LambdaResponse:
    return json_response(200, body)


def response_204() -> LambdaResponse:
    return {'statusCode': 204, 'headers': {}, 'body': ''}


def response_302(*, location: str) -> LambdaResponse:
    return {
        'statusCode': 302,
        'headers': {'Location': location, 'Cache-Control': 'no-store'},
        'body': '',
    }


def response_401(reason: DenyReason | None = None) -> LambdaResponse:
    headers = {'WWW-Authenticate': f'Bearer error="{reason}"' if reason else 'Bearer'}
    return json_response(401, {'error': 'Unauthorized'}, headers=headers)


def response_404(message: str = 'Not found') -> LambdaResponse:
    return json_response(404, {'error': message})


def response_500(message: str | None = None) -> LambdaResponse:
    base = 'Internal Server Error'
    return json_response(500, {'error': base if not message else f'{base} ({message})'})


def response_503() -> LambdaResponse:
    return json_response(503, {'error': 'Service Unavailable'})


def error_response(error: HTTPError) -> LambdaResponse:
    return json_response(error.status_code, {'error': error.message})
