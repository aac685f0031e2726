"""Login, OAuth callback and logout handlers.

Which login routes do anything depends on the configured auth mode:

    mode      GET /api/login        POST /api/login      GET /api/callback
    oauth     302 to provider       404                  302 to / or /login?error=
    password  204                   200 {token, ...}     404
    none      404                   404                  404
"""

import logging

from edgeshortener.constants import AuthMode, LoginError
from edgeshortener.types import LambdaResponse
from edgeshortener.exceptions import ValidationError, UnauthorizedError, NotFoundError
from edgeshortener.dao.exceptions import DataStoreError
from edgeshortener.utils.helpers import to_epoch_ms
from edgeshortener.auth.password import verify_password
from edgeshortener.web.request import Request
from edgeshortener.web.context import HandlerContext
from edgeshortener.web.responses import response_200, response_204, response_302
from edgeshortener.handlers.constants import PASSWORD_LOGIN_FAILED, CALLBACK_STORE_FAILURE


logger = logging.getLogger(__name__)


def login_start(request: Request, context: HandlerContext) -> LambdaResponse:
    mode = context.settings.auth_mode
    if mode is AuthMode.OAUTH:
        return response_302(location=context.oauth.initiate(request))
    if mode is AuthMode.PASSWORD:
        return response_204()
    raise NotFoundError()


def login_password(request: Request, context: HandlerContext) -> LambdaResponse:
    if context.settings.auth_mode is not AuthMode.PASSWORD:
        raise NotFoundError()

    # 1- Extract password from request body
    password = request.json_object().get('password')
    if not isinstance(password, str) or not password:
        raise ValidationError('Password is required')

    # 2- Check it against the configured hash
    if not verify_password(password, context.settings.password_hash):
        logger.info('Wrong admin password. Responding with 401.', extra={'event': PASSWORD_LOGIN_FAILED})
        raise UnauthorizedError('Invalid password')

    # 3- Issue a session
    session = context.sessions.create_session(role='admin')
    return response_200({'token': session.token, 'expiresAt': to_epoch_ms(session.expires_at)})


def callback(request: Request, context: HandlerContext) -> LambdaResponse:
    if context.settings.auth_mode is not AuthMode.OAUTH:
        raise NotFoundError()

    # Browser-facing: a store outage still ends on the login page
    try:
        location = context.oauth.callback(request)
    except DataStoreError:
        logger.exception('Data store failure during OAuth callback.', extra={'event': CALLBACK_STORE_FAILURE})
        location = context.oauth.login_error_url(request, LoginError.UNKNOWN)
    return response_302(location=location)


def logout(request: Request, context: HandlerContext) -> LambdaResponse:
    token = request.bearer_token()
    if token and token != context.settings.api_key:
        context.sessions.revoke_session(token)
    return response_200({'success': True})
