"""Inbound request parsed from an API Gateway (REST, Lambda proxy) event.

Example:
    >>> event = {
    ...     'httpMethod': 'POST',
    ...     'path': '/api/shorten',
    ...     'headers': {'Authorization': 'Bearer s3cr3t'},
    ...     'body': '{"url": "https://example.com"}',
    ...     'requestContext': {'domainName': 'hop.example.com'},
    ... }
    >>> request = Request.from_event(event)
    >>> request.bearer_token()
    's3cr3t'
    >>> request.json()['url']
    'https://example.com'
"""

import base64
import binascii
import json
from dataclasses import dataclass, field, replace
from typing import Any

from edgeshortener.types import LambdaEvent
from edgeshortener.exceptions import MalformedInputError
from edgeshortener.utils.helpers import base_url


@dataclass(frozen=True)
class Request:
    method: str
    path: str
    origin: str
    headers: dict[str, str] = field(default_factory=dict)  # lower-cased names
    query: dict[str, str] = field(default_factory=dict)
    body: str | None = None
    path_params: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_event(cls, event: LambdaEvent) -> 'Request':
        """Build a Request from a Lambda proxy event.

        Raises:
            MalformedInputError:
                If a base64-encoded body can't be decoded.
        """
        body = event.get('body')
        if body is not None and event.get('isBase64Encoded'):
            try:
                body = base64.b64decode(body).decode('utf-8')
            except (binascii.Error, UnicodeDecodeError) as e:
                raise MalformedInputError('Invalid request body encoding') from e

        headers = event.get('headers') or {}
        return cls(
            method=(event.get('httpMethod') or 'GET').upper(),
            path=event.get('path') or '/',
            origin=base_url(event).rstrip('/'),
            headers={name.lower(): value for name, value in headers.items()},
            query=dict(event.get('queryStringParameters') or {}),
            body=body,
        )

    def with_path_params(self, path_params: dict[str, str]) -> 'Request':
        return replace(self, path_params=path_params)

    def header(self, name: str) -> str | None:
        return self.headers.get(name.lower())

    def bearer_token(self) -> str | None:
        """Return the credential of a `Bearer` Authorization header, None for any other scheme."""
        authorization = self.header('authorization')
        if not authorization:
            return None

        scheme, _, credential = authorization.partition(' ')
        if scheme.lower() != 'bearer':
            return None
        return credential.strip() or None

    def json(self) -> Any:
        """Parse the body as JSON.

        Raises:
            MalformedInputError:
                If the body is missing or isn't valid JSON.
        """
        try:
            return json.loads(self.body or '')
        except json.JSONDecodeError as e:
            raise MalformedInputError('Invalid request') from e

    def json_object(self) -> dict[str, Any]:
        """Parse the body as a JSON object.

        Raises:
            MalformedInputError:
                If the body isn't a JSON object.
        """
        payload = self.json()
        if not isinstance(payload, dict):
            raise MalformedInputError('Invalid request')
        return payload
