"""Unit tests for the edge_router AWS Lambda handler.

Requests go through the whole stack (event parsing, router, auth gate,
handlers, DAOs) over the in-memory Redis double.

Test coverage includes:

1. Link lifecycle scenarios (shorten, redirect, conflict, update)
2. Authentication scenarios (missing, expired, API key, OAuth login)
3. Infrastructure failures (configuration, Redis, malformed events)
4. Redis client construction
"""

import json
from datetime import datetime, timedelta, UTC
from unittest.mock import MagicMock
from urllib.parse import urlsplit, parse_qs

import httpx
import pytest
import redis
from freezegun import freeze_time

from edgeshortener.models import SessionModel
from edgeshortener.dao.redis import SessionRedisDAO
from edgeshortener.exceptions import BadConfigurationError
from edgeshortener.lambdas.edge_router import app


NOW = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)
API_KEY = 'test-api-key'

# Captured before the autouse fixture replaces it
redis_client_from_config = app.redis_client_from_config


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture(autouse=True)
def _patch_lambda_dependencies(monkeypatch, settings, fake_redis):
    monkeypatch.setattr(app, 'load_settings', lambda: settings)
    monkeypatch.setattr(app, 'load_config', lambda lambda_name: {'redis': {'url': 'redis://redis.test:6379/0'}})
    monkeypatch.setattr(app, 'redis_client_from_config', lambda app_config: fake_redis)


@pytest.fixture
def idp_client(monkeypatch):
    client = MagicMock()
    client.__enter__.return_value = client
    client.post.return_value = httpx.Response(200, json={'me': 'https://alice.example', 'role': 'admin'})
    monkeypatch.setattr('edgeshortener.auth.oauth.httpx.Client', MagicMock(return_value=client))
    return client


def event(method: str, path: str, *, body=None, token: str | None = None, query: dict | None = None) -> dict:
    return {
        'httpMethod': method,
        'path': path,
        'headers': {'Authorization': f'Bearer {token}'} if token else {},
        'queryStringParameters': query,
        'body': json.dumps(body) if body is not None else None,
        'requestContext': {'domainName': 'hop.example.com', 'stage': 'Prod'},
    }


def invoke(*args, **kwargs) -> dict:
    return app.lambda_handler(event(*args, **kwargs), None)


def body(response: dict):
    return json.loads(response['body'])


# -------------------------------
# 1. Link lifecycle
# -------------------------------


def test_shorten_then_redirect(fake_redis):
    created = invoke('POST', '/api/shorten', body={'url': 'https://example.com/landing'}, token=API_KEY)
    code = body(created)['shortCode']

    for path in (f'/{code}', f'/h/{code}'):
        response = invoke('GET', path)
        assert response['statusCode'] == 302
        assert response['headers']['Location'] == 'https://example.com/landing'


def test_slug_conflict_never_overwrites():
    first = invoke('POST', '/api/shorten', body={'url': 'https://example.com', 'slug': 'abc'}, token=API_KEY)
    second = invoke('POST', '/api/shorten', body={'url': 'https://evil.example', 'slug': 'abc'}, token=API_KEY)

    assert (first['statusCode'], body(first)) == (200, {'shortCode': 'abc', 'url': 'https://example.com'})
    assert (second['statusCode'], body(second)) == (409, {'error': 'Slug already exists'})
    assert invoke('GET', '/abc')['headers']['Location'] == 'https://example.com'


def test_update_keeps_created():
    with freeze_time(NOW):
        invoke('POST', '/api/shorten', body={'url': 'https://example.com', 'slug': 'abc'}, token=API_KEY)

    with freeze_time(NOW + timedelta(days=3)):
        response = invoke('PUT', '/api/urls/abc', body={'url': 'https://new.com'}, token=API_KEY)

    assert response['statusCode'] == 200
    assert body(response) == {'shortCode': 'abc', 'url': 'https://new.com', 'created': int(NOW.timestamp() * 1000)}


def test_missing_links():
    assert invoke('PUT', '/api/urls/nope', body={'url': 'https://new.com'}, token=API_KEY)['statusCode'] == 404
    assert invoke('DELETE', '/api/urls/nope', token=API_KEY)['statusCode'] == 404

    page = invoke('GET', '/nope')
    assert page['statusCode'] == 404
    assert page['headers']['Content-Type'].startswith('text/html')


def test_validation_errors():
    missing_url = invoke('POST', '/api/shorten', body={'slug': 'abc'}, token=API_KEY)
    malformed = app.lambda_handler({**event('POST', '/api/shorten', token=API_KEY), 'body': '{nope'}, None)

    assert (missing_url['statusCode'], body(missing_url)) == (400, {'error': 'URL is required'})
    assert (malformed['statusCode'], body(malformed)) == (400, {'error': 'Invalid request'})


def test_unknown_route():
    response = invoke('PATCH', '/api/urls/abc', token=API_KEY)

    assert (response['statusCode'], body(response)) == (404, {'error': 'Not found'})


def test_listing_never_exposes_internal_keys(fake_redis):
    invoke('POST', '/api/shorten', body={'url': 'https://example.com', 'slug': 'abc'}, token=API_KEY)
    fake_redis.set('session:tok', json.dumps({'expiresAt': 4102444800000}))
    fake_redis.set('oauth:state', json.dumps({'codeVerifier': 'v' * 43}))

    response = invoke('GET', '/api/urls', token=API_KEY)

    assert [item['shortCode'] for item in body(response)['urls']] == ['abc']


def test_public_pages():
    for path in ('/', '/login'):
        response = invoke('GET', path)
        assert response['statusCode'] == 200
        assert response['headers']['Content-Type'].startswith('text/html')


# -------------------------------
# 2. Authentication
# -------------------------------


@pytest.mark.parametrize(
    'method, path',
    [('GET', '/api/urls'), ('POST', '/api/shorten'), ('PUT', '/api/urls/abc'), ('DELETE', '/api/urls/abc')],
)
def test_protected_routes_require_credentials(method, path):
    response = invoke(method, path, body={'url': 'https://example.com'})

    assert response['statusCode'] == 401
    assert response['headers']['WWW-Authenticate'] == 'Bearer error="missing_credentials"'


def test_unknown_session_token():
    response = invoke('GET', '/api/urls', token='forged')

    assert response['headers']['WWW-Authenticate'] == 'Bearer error="invalid_session"'


def test_expired_session_is_rejected_and_deleted(fake_redis):
    SessionRedisDAO(redis_client=fake_redis).insert(SessionModel(token='old', expires_at=NOW), ttl=86400)

    with freeze_time(NOW):
        response = invoke('GET', '/api/urls', token='old')

    assert response['statusCode'] == 401
    assert response['headers']['WWW-Authenticate'] == 'Bearer error="expired_session"'
    assert 'session:old' not in fake_redis.data


def test_oauth_login_grants_session(idp_client):
    login = invoke('GET', '/api/login')
    state = parse_qs(urlsplit(login['headers']['Location']).query)['state'][0]

    callback = invoke('GET', '/api/callback', query={'code': 'auth-code', 'state': state})
    location = callback['headers']['Location']
    token = parse_qs(urlsplit(location).query)['token'][0]

    assert location.startswith('https://hop.example.com/?token=')
    assert invoke('GET', '/api/urls', token=token)['statusCode'] == 200
    assert idp_client.post.call_args.kwargs['data']['redirect_uri'] == 'https://hop.example.com/api/callback'

    assert body(invoke('POST', '/api/logout', token=token)) == {'success': True}
    assert invoke('GET', '/api/urls', token=token)['statusCode'] == 401


def test_oauth_login_without_admin_role(idp_client, fake_redis):
    idp_client.post.return_value = httpx.Response(200, json={'me': 'https://mallory.example', 'role': 'user'})
    login = invoke('GET', '/api/login')
    state = parse_qs(urlsplit(login['headers']['Location']).query)['state'][0]

    callback = invoke('GET', '/api/callback', query={'code': 'auth-code', 'state': state})

    assert callback['statusCode'] == 302
    assert callback['headers']['Location'] == 'https://hop.example.com/login?error=unauthorized_role'
    assert not any(key.startswith('session:') for key in fake_redis.data)


def test_oauth_callback_with_unknown_state(idp_client):
    callback = invoke('GET', '/api/callback', query={'code': 'auth-code', 'state': 'never-issued'})

    assert callback['headers']['Location'] == 'https://hop.example.com/login?error=invalid_state'
    idp_client.post.assert_not_called()


# -------------------------------
# 3. Infrastructure failures
# -------------------------------


def test_configuration_error(monkeypatch):
    monkeypatch.setattr(app, 'load_settings', MagicMock(side_effect=BadConfigurationError('bad mode')))

    response = invoke('GET', '/abc')

    assert (response['statusCode'], body(response)) == (500, {'error': 'Internal Server Error'})


def test_redis_unreachable(fake_redis, monkeypatch):
    monkeypatch.setattr(fake_redis, 'ping', MagicMock(side_effect=redis.exceptions.ConnectionError('down')))

    response = invoke('GET', '/abc')

    assert (response['statusCode'], body(response)) == (503, {'error': 'Service Unavailable'})


def test_redis_failure_mid_request(fake_redis, monkeypatch):
    monkeypatch.setattr(fake_redis, 'hgetall', MagicMock(side_effect=redis.exceptions.TimeoutError('slow')))

    assert invoke('GET', '/abc')['statusCode'] == 503


def test_undecodable_base64_body():
    response = app.lambda_handler({**event('POST', '/api/shorten', token=API_KEY), 'body': '//4=', 'isBase64Encoded': True}, None)

    assert response['statusCode'] == 400


def test_unhandled_exception_is_500(monkeypatch):
    monkeypatch.setattr(app.ROUTER, 'dispatch', MagicMock(side_effect=RuntimeError('boom')))

    response = invoke('GET', '/abc')

    assert (response['statusCode'], body(response)) == (500, {'error': 'Internal Server Error'})


# -------------------------------
# 4. Redis client construction
# -------------------------------


def test_redis_client_from_url(monkeypatch):
    from_url = MagicMock()
    monkeypatch.setattr(app.redis.Redis, 'from_url', from_url)

    client = redis_client_from_config({'redis': {'url': 'redis://localhost:6379/0'}})

    from_url.assert_called_once_with('redis://localhost:6379/0', decode_responses=True)
    assert client is from_url.return_value


def test_redis_client_from_host_config(monkeypatch):
    redis_class = MagicMock()
    monkeypatch.setattr(app.redis, 'Redis', redis_class)

    redis_client_from_config({'redis': {'host': 'cache.internal', 'port': '6380', 'db': 2}})

    redis_class.assert_called_once_with(host='cache.internal', port=6380, db=2, username=None, password=None, decode_responses=True)
