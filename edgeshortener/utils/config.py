"""Application configuration.

Two sources feed the edge router:

* The store binding comes from **AWS AppConfig**. Each environment (`APP_ENV`)
  has a dedicated AppConfig *Environment* within the shared AppConfig
  *Application* identified by `APP_NAME`. The deployed JSON document looks like:

      {
          "active_backend": "redis",
          "configs": {
              "edge_router": {
                  "redis": {"host": "...", "port": 6379, "db": 0}
              }
          }
      }

  Setting `REDIS_URL` short-circuits AppConfig entirely (local runs, tests).

* Authentication settings come from environment variables. Secrets (API key,
  OAuth client secret) may be given in plain text or as the name of an AWS
  Secrets Manager secret.

Example:
    >>> from edgeshortener.utils.config import load_config, load_settings
    >>> load_config('edge_router')['redis']['host']
    'hop.xxxxxx.cache.amazonaws.com'
    >>> load_settings().auth_mode
    <AuthMode.OAUTH: 'oauth'>
"""

import os
import json
import functools
import logging
from dataclasses import dataclass
from collections.abc import Callable

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from edgeshortener.types import LambdaConfiguration, SecretsManagerClient
from edgeshortener.constants import ENV, AuthMode, OAuthDefaults
from edgeshortener.utils.helpers import require_environment
from edgeshortener.utils.runtime import running_locally
from edgeshortener.exceptions import BadConfigurationError, InfrastructureError, MalformedResponseError


logger = logging.getLogger(__name__)


def app_env() -> str:
    return os.environ.get(ENV.App.APP_ENV, 'local').lower()


def app_name() -> str | None:
    return os.environ.get(ENV.App.APP_NAME)


def app_prefix() -> str | None:
    """Return application prefix for DAOs as <app name>:<app env>, None if APP_NAME is not set."""
    return None if app_name() is None else f'{app_name()}:{app_env()}'


def _redis_url_override(func: Callable) -> Callable:
    """Decorator: skip AppConfig when `REDIS_URL` points at a Redis server directly."""

    @functools.wraps(func)
    def wrapper(lambda_name: str) -> LambdaConfiguration:
        redis_url = os.getenv(ENV.Redis.URL)
        if not redis_url:
            return func(lambda_name)

        logger.debug('Using REDIS_URL instead of AppConfig.', extra={'lambdaName': lambda_name})
        return {'redis': {'url': redis_url}}

    return wrapper


@_redis_url_override
@require_environment(ENV.AppConfig.APP_ID, ENV.AppConfig.ENV_ID, ENV.AppConfig.PROFILE_ID)
def load_config(lambda_name: str) -> LambdaConfiguration:
    """Load configuration for a given Lambda from AWS AppConfig.

    Fetches the AppConfig JSON once and returns the active backend section
    relevant to the requested Lambda function, e.g. {'redis': {...}}.

    Raises:
        MissingEnvironmentVariableError:
            If the AppConfig identifiers aren't set.
        MalformedResponseError:
            If the AppConfig document lacks the expected structure.
    """
    logger.debug('Trying to load AppConfig from AWS AppConfig.', extra={'lambdaName': lambda_name})

    appconfig = boto3.client('appconfigdata')

    # Start an AppConfig data session
    session_token = appconfig.start_configuration_session(
        ApplicationIdentifier=os.environ[ENV.AppConfig.APP_ID],
        EnvironmentIdentifier=os.environ[ENV.AppConfig.ENV_ID],
        ConfigurationProfileIdentifier=os.environ[ENV.AppConfig.PROFILE_ID],
    )['InitialConfigurationToken']

    # Fetch the configuration
    response = appconfig.get_latest_configuration(ConfigurationToken=session_token)
    content = response['Configuration'].read()

    try:
        config = json.loads(content.decode('utf-8'))
        backend = config['active_backend']
        data = {backend: config['configs'][lambda_name][backend]}
    except (ValueError, KeyError, TypeError) as e:
        raise MalformedResponseError(f'Malformed AppConfig document for {lambda_name!r}') from e

    logger.debug('Loaded AppConfig from AWS AppConfig.', extra={'lambdaName': lambda_name, 'build': config.get('build')})
    return data


def resolve_secret(
    value_env: str,
    name_env: str | None = None,
    secrets_client: SecretsManagerClient | None = None,
) -> str | None:
    """Resolve a secret from the environment or from AWS Secrets Manager.

    A plain value in `value_env` wins. Otherwise, if `name_env` names a secret,
    its SecretString is fetched (from LocalStack when running locally).

    Returns:
        str | None: The secret, or None if neither variable is set.

    Raises:
        InfrastructureError:
            If Secrets Manager can't be reached or rejects the request.
        MalformedResponseError:
            If the secret has no SecretString.
    """
    value = os.environ.get(value_env)
    if value:
        return value

    secret_name = os.environ.get(name_env) if name_env else None
    if not secret_name:
        return None

    # fmt: off
    client_kwargs = {
        'endpoint_url': os.environ.get(ENV.LocalStack.ENDPOINT, 'http://localhost:4566'),
    } if running_locally() else {}
    # fmt: on
    sm = secrets_client or boto3.client('secretsmanager', **client_kwargs)

    try:
        secret = sm.get_secret_value(SecretId=secret_name).get('SecretString')
    except (BotoCoreError, ClientError) as e:
        raise InfrastructureError(f"Can't read secret {secret_name!r} from Secrets Manager.") from e

    if not secret:
        raise MalformedResponseError(f'Secret {secret_name!r} has no SecretString.')
    return secret


@dataclass(frozen=True)
class Settings:
    """Process-wide settings for request handling.

    Attributes:
        auth_mode: Which login flow guards the admin API.
        api_key: Static bearer credential for machine clients; None disables it.
        password_hash: bcrypt hash checked in password mode.
        public_host: Public origin override, e.g. 'https://hop.example.com'.
        oauth_provider_url: Identity provider base URL.
        oauth_client_id / oauth_client_secret: Client credentials.
        oauth_scopes: Space-separated scopes requested at authorization.
        allowed_roles: Roles granted an admin session.
        shortcode_salt: Salt for generated short codes.
    """

    auth_mode: AuthMode = AuthMode.OAUTH
    api_key: str | None = None
    password_hash: str | None = None
    public_host: str | None = None
    oauth_provider_url: str | None = None
    oauth_client_id: str | None = None
    oauth_client_secret: str | None = None
    oauth_scopes: str = OAuthDefaults.SCOPES
    allowed_roles: tuple[str, ...] = OAuthDefaults.ALLOWED_ROLES
    shortcode_salt: str = 'edgeshortener'


def load_settings(secrets_client: SecretsManagerClient | None = None) -> Settings:
    """Build Settings from the environment.

    Raises:
        BadConfigurationError:
            If AUTH_MODE is unknown, or values the selected mode needs are missing.
    """
    raw_mode = os.environ.get(ENV.Auth.MODE, AuthMode.OAUTH).lower()
    try:
        auth_mode = AuthMode(raw_mode)
    except ValueError as e:
        raise BadConfigurationError(f'Unknown {ENV.Auth.MODE} {raw_mode!r}') from e

    public_host = os.environ.get(ENV.Auth.PUBLIC_HOST) or None
    roles = os.environ.get(ENV.OAuth.ALLOWED_ROLES)
    settings = Settings(
        auth_mode=auth_mode,
        api_key=resolve_secret(ENV.Auth.API_KEY, ENV.Auth.API_KEY_SECRET, secrets_client),
        password_hash=os.environ.get(ENV.Auth.ADMIN_PASSWORD_HASH) or None,
        public_host=public_host.rstrip('/') if public_host else None,
        oauth_provider_url=os.environ.get(ENV.OAuth.PROVIDER_URL) or None,
        oauth_client_id=os.environ.get(ENV.OAuth.CLIENT_ID) or None,
        oauth_client_secret=(
            resolve_secret(ENV.OAuth.CLIENT_SECRET, ENV.OAuth.CLIENT_SECRET_NAME, secrets_client)
            if auth_mode is AuthMode.OAUTH
            else None
        ),
        oauth_scopes=os.environ.get(ENV.OAuth.SCOPES) or OAuthDefaults.SCOPES,
        allowed_roles=tuple(role.strip() for role in roles.split(',') if role.strip()) if roles else OAuthDefaults.ALLOWED_ROLES,
        shortcode_salt=os.environ.get(ENV.App.SHORTCODE_SALT) or 'edgeshortener',
    )

    if auth_mode is AuthMode.OAUTH:
        missing = [
            name
            for name, value in (
                (ENV.OAuth.PROVIDER_URL, settings.oauth_provider_url),
                (ENV.OAuth.CLIENT_ID, settings.oauth_client_id),
                (ENV.OAuth.CLIENT_SECRET, settings.oauth_client_secret),
            )
            if not value
        ]
        if missing:
            raise BadConfigurationError(f'OAuth mode requires {", ".join(missing)}')
    elif auth_mode is AuthMode.PASSWORD and not settings.password_hash:
        raise BadConfigurationError(f'Password mode requires {ENV.Auth.ADMIN_PASSWORD_HASH}')

    return settings
