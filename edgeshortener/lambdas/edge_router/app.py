import logging
from typing import Any

import redis

from edgeshortener.types import LambdaEvent, LambdaContext, LambdaResponse, LambdaConfiguration
from edgeshortener.exceptions import ConfigurationError, InfrastructureError, MalformedInputError, MalformedResponseError
from edgeshortener.dao.exceptions import DataStoreError
from edgeshortener.dao.redis import ShortURLRedisDAO, SessionRedisDAO, OAuthTransactionRedisDAO, KeyspaceRedisDAO
from edgeshortener.utils import load_config, load_settings, app_prefix, Settings, BackgroundTasks
from edgeshortener.utils.helpers import guarantee_500_response
from edgeshortener.auth.sessions import SessionManager
from edgeshortener.auth.gate import AuthGate
from edgeshortener.auth.oauth import OAuthFlow
from edgeshortener.auth.sweep import SessionSweeper
from edgeshortener.web.request import Request
from edgeshortener.web.context import HandlerContext
from edgeshortener.web.responses import error_response, response_500, response_503
from edgeshortener.handlers import build_router
from edgeshortener.lambdas.edge_router.constants import (
    LAMBDA_NAME,
    CONFIGURATION_FAILURE,
    MALFORMED_REQUEST,
    REQUEST_RECEIVED,
)


logger = logging.getLogger(__name__)

ROUTER = build_router()


def redis_client_from_config(app_config: LambdaConfiguration) -> redis.Redis:
    """Build one Redis client shared by every DAO of an invocation.

    Accepts either {'redis': {'url': ...}} or {'redis': {'host': ..., 'port': ..., 'db': ...}}.
    """
    redis_config = dict(app_config['redis'])
    if 'url' in redis_config:
        return redis.Redis.from_url(redis_config['url'], decode_responses=True)

    return redis.Redis(
        host=redis_config.get('host', 'localhost'),
        port=int(redis_config.get('port', 6379)),
        db=int(redis_config.get('db', 0)),
        username=redis_config.get('username'),
        password=redis_config.get('password'),
        decode_responses=True,
    )


def build_context(
    settings: Settings,
    redis_client: redis.Redis,
    background: BackgroundTasks | None = None,
    http_client: Any = None,
) -> HandlerContext:
    """Wire DAOs, auth components and handlers' collaborators over one Redis client.

    Raises:
        DataStoreError:
            If Redis doesn't answer the healthcheck PING.
    """
    prefix = app_prefix()
    background = background or BackgroundTasks()

    # Only the first DAO pings; the rest share its connection pool
    links = ShortURLRedisDAO(redis_client=redis_client, prefix=prefix)
    keyspace = KeyspaceRedisDAO(redis_client=redis_client, prefix=prefix, healthcheck=False)
    session_dao = SessionRedisDAO(redis_client=redis_client, prefix=prefix, healthcheck=False)
    transaction_dao = OAuthTransactionRedisDAO(redis_client=redis_client, prefix=prefix, healthcheck=False)

    sessions = SessionManager(session_dao, background)
    return HandlerContext(
        settings=settings,
        links=links,
        keyspace=keyspace,
        sessions=sessions,
        oauth=OAuthFlow(transaction_dao, sessions, settings, http_client=http_client),
        sweeper=SessionSweeper(session_dao, background),
        gate=AuthGate(sessions, settings),
        background=background,
    )


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle every API Gateway request of the shortener.

    This Lambda handler follows this procedure:
    - Step 1: Load settings and the data store binding
    - Step 2: Parse the proxy event into a Request
    - Step 3: Connect to Redis and wire the handler context
    - Step 4: Dispatch through the router (auth gate, then handler)

    HTTP responses:
        2xx/3xx/4xx: as returned by the matched handler
        401: missing, invalid or expired credential on a protected route
            headers:
                WWW-Authenticate: Bearer error="<reason>"
        500: configuration error or unhandled exception
        503: data store unreachable

    Args:
        event (dict):
            API Gateway proxy event.
        context (LambdaContext):
            AWS Lambda runtime context object (not used directly).

    Returns:
        dict:
            API Gateway-compatible response including statusCode, headers, and body.

    Example:
        >>> event = {'httpMethod': 'GET', 'path': '/Gh71TCN', 'headers': {}}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        302
    """
    # 1- Load settings and store binding
    try:
        settings = load_settings()
        app_config = load_config(LAMBDA_NAME)
    except (ConfigurationError, InfrastructureError, MalformedResponseError):
        logger.exception(
            'Failed to load configuration for edge router. Responding with 500.',
            extra={'event': CONFIGURATION_FAILURE},
        )
        return response_500()

    # 2- Parse request
    try:
        request = Request.from_event(event)
    except MalformedInputError as e:
        logger.info('Malformed request event. Responding with 400.', extra={'event': MALFORMED_REQUEST})
        return error_response(e)
    logger.debug('Request received.', extra={'event': REQUEST_RECEIVED, 'method': request.method, 'path': request.path})

    # 3- Connect to data store
    try:
        handler_context = build_context(settings, redis_client_from_config(app_config))
    except DataStoreError:
        logger.exception('Data store unavailable. Responding with 503.', extra={'path': request.path})
        return response_503()

    # 4- Route request
    return ROUTER.dispatch(request, handler_context)
