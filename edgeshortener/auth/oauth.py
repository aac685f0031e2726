"""OAuth2 Authorization Code flow with PKCE against the configured identity provider.

The flow has two phases bridged by an OAuthTransactionModel stored for 10 minutes:

    initiate:  GET /api/login     -> 302 <provider>/auth/authorize?...&state=<state>&code_challenge=...
    callback:  GET /api/callback  -> 302 /?token=<session token>   (or /login?error=<marker>)

The redirect URI is computed once, at initiation, and stored with the
transaction. The callback sends the stored value to the token endpoint, so a
request reaching the callback through a different host or proxy can't break
the exchange with a mismatched redirect_uri.

Example:
    >>> flow = OAuthFlow(OAuthTransactionRedisDAO(...), sessions, settings)
    >>> flow.initiate(request)
    'https://idp.example.com/auth/authorize?response_type=code&client_id=hop&...'
"""

import logging
from urllib.parse import urlencode, urljoin

import httpx

from edgeshortener.constants import TTL, LoginError, OAuthDefaults
from edgeshortener.models import OAuthTransactionModel
from edgeshortener.types import TokenResponse
from edgeshortener.dao.base import OAuthTransactionBaseDAO
from edgeshortener.dao.exceptions import OAuthTransactionNotFoundError, MalformedRecordError
from edgeshortener.exceptions import UpstreamFailureError
from edgeshortener.utils.config import Settings
from edgeshortener.web.request import Request
from edgeshortener.auth.sessions import SessionManager
from edgeshortener.auth.pkce import generate_state, generate_code_verifier, code_challenge
from edgeshortener.auth.constants import (
    OAUTH_INITIATED,
    OAUTH_INVALID_STATE,
    OAUTH_TOKEN_EXCHANGE_FAILED,
    OAUTH_UNAUTHORIZED_ROLE,
    OAUTH_LOGIN_SUCCESS,
)


logger = logging.getLogger(__name__)


class OAuthFlow:
    def __init__(
        self,
        transactions: OAuthTransactionBaseDAO,
        sessions: SessionManager,
        settings: Settings,
        http_client: httpx.Client | None = None,
    ):
        self.transactions = transactions
        self.sessions = sessions
        self.settings = settings
        self.http_client = http_client

    def redirect_uri(self, request: Request) -> str:
        """Callback URL: the configured public host if any, else the request's own origin."""
        host = self.settings.public_host or request.origin
        return f'{host.rstrip("/")}{OAuthDefaults.CALLBACK_PATH}'

    @staticmethod
    def login_error_url(request: Request, marker: str) -> str:
        return f'{request.origin}/login?{urlencode({"error": marker})}'

    def initiate(self, request: Request) -> str:
        """Start an authorization transaction and return the provider URL to redirect to.

        Raises:
            DataStoreError:
                If the transaction can't be stored.
        """
        state = generate_state()
        code_verifier = generate_code_verifier()
        redirect_uri = self.redirect_uri(request)

        self.transactions.insert(
            OAuthTransactionModel(state=state, code_verifier=code_verifier, redirect_uri=redirect_uri),
            ttl=TTL.OAUTH_TRANSACTION,
        )

        params = {
            'response_type': 'code',
            'client_id': self.settings.oauth_client_id,
            'redirect_uri': redirect_uri,
            'state': state,
            'code_challenge': code_challenge(code_verifier),
            'code_challenge_method': 'S256',
            'scope': self.settings.oauth_scopes,
        }
        logger.info('OAuth authorization initiated.', extra={'event': OAUTH_INITIATED, 'redirectUri': redirect_uri})
        return f'{urljoin(self.settings.oauth_provider_url, OAuthDefaults.AUTHORIZE_PATH)}?{urlencode(params)}'

    def callback(self, request: Request) -> str:
        """Complete an authorization transaction and return where to send the user agent.

        Every failure short of a store outage ends on the login page with an
        error marker (see LoginError). Success ends on the application root
        with the new session token in the `token` query parameter.

        Raises:
            DataStoreError:
                If the store is unreachable.
        """
        # 1- Both the code and the state are required
        code = request.query.get('code')
        state = request.query.get('state')
        if not code or not state:
            return self.login_error_url(request, LoginError.MISSING_PARAMS)

        # 2- Consume the transaction (single use)
        try:
            transaction = self.transactions.consume(state)
        except (OAuthTransactionNotFoundError, MalformedRecordError):
            logger.info('Unknown or malformed OAuth state.', extra={'event': OAUTH_INVALID_STATE})
            return self.login_error_url(request, LoginError.INVALID_STATE)

        # 3- Exchange the code for a token
        redirect_uri = transaction.redirect_uri or self.redirect_uri(request)
        try:
            token_data = self.exchange_code(code, transaction.code_verifier, redirect_uri)
        except UpstreamFailureError as e:
            return self.login_error_url(request, e.marker)

        # 4- Only privileged identities get a session
        role = token_data.get('role')
        if role not in self.settings.allowed_roles:
            logger.info(
                'Identity lacks an allowed role.',
                extra={'event': OAUTH_UNAUTHORIZED_ROLE, 'me': token_data.get('me'), 'role': role},
            )
            return self.login_error_url(request, LoginError.UNAUTHORIZED_ROLE)

        # 5- Issue the session and hand it to the client-side application
        session = self.sessions.create_session(profile=token_data.get('profile'), me=token_data.get('me'), role=role)
        logger.info('OAuth login succeeded.', extra={'event': OAUTH_LOGIN_SUCCESS, 'me': session.me})
        return f'{request.origin}/?{urlencode({"token": session.token})}'

    def exchange_code(self, code: str, code_verifier: str, redirect_uri: str) -> TokenResponse:
        """POST the authorization code to the provider's token endpoint.

        Raises:
            UpstreamFailureError:
                marker `token_exchange_failed` on a non-2xx response,
                marker `unknown` on transport errors or an undecodable body.
        """
        token_url = urljoin(self.settings.oauth_provider_url, OAuthDefaults.TOKEN_PATH)
        data = {
            'grant_type': 'authorization_code',
            'code': code,
            'client_id': self.settings.oauth_client_id,
            'client_secret': self.settings.oauth_client_secret,
            'redirect_uri': redirect_uri,
            'code_verifier': code_verifier,
        }

        try:
            response = self._post(token_url, data)
        except httpx.HTTPError as e:
            logger.exception('Token exchange request failed.', extra={'event': OAUTH_TOKEN_EXCHANGE_FAILED})
            raise UpstreamFailureError(LoginError.UNKNOWN, str(e)) from e

        if not response.is_success:
            logger.error(
                'Token exchange rejected by identity provider.',
                extra={
                    'event': OAUTH_TOKEN_EXCHANGE_FAILED,
                    'status': response.status_code,
                    'redirectUri': redirect_uri,
                    'body': response.text[:500],
                },
            )
            raise UpstreamFailureError(LoginError.TOKEN_EXCHANGE_FAILED, f'HTTP {response.status_code}')

        try:
            token_data = response.json()
        except ValueError as e:
            logger.exception('Undecodable token response.', extra={'event': OAUTH_TOKEN_EXCHANGE_FAILED})
            raise UpstreamFailureError(LoginError.UNKNOWN, 'Undecodable token response') from e

        if not isinstance(token_data, dict):
            raise UpstreamFailureError(LoginError.UNKNOWN, 'Token response is not a JSON object')
        return token_data

    def _post(self, url: str, data: dict[str, str]) -> httpx.Response:
        headers = {'Accept': 'application/json'}
        if self.http_client is not None:
            return self.http_client.post(url, data=data, headers=headers)

        with httpx.Client() as client:
            return client.post(url, data=data, headers=headers)
