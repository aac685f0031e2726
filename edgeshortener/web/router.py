"""Method + path dispatch table.

Routes are matched in declaration order; the first route whose method and
pattern both match wins. Pattern segments written as `{name}` match one path
segment and are passed to the handler as `request.path_params[name]`.

Example:
    >>> router = Router()
    >>> router.add('GET', '/h/{code}', links.redirect, public=True)
    >>> router.add('DELETE', '/api/urls/{code}', links.delete_url)
    >>> response = router.dispatch(request, context)
"""

import re
import logging
from dataclasses import dataclass, field
from collections.abc import Callable
from urllib.parse import unquote

from edgeshortener.types import LambdaResponse
from edgeshortener.exceptions import HTTPError
from edgeshortener.dao.exceptions import DataStoreError
from edgeshortener.auth.gate import Deny
from edgeshortener.web.request import Request
from edgeshortener.web.context import HandlerContext
from edgeshortener.web.responses import error_response, response_401, response_404, response_503


logger = logging.getLogger(__name__)

type Handler = Callable[[Request, HandlerContext], LambdaResponse]

_PARAM = re.compile(r'\{(\w+)\}')


def compile_pattern(pattern: str) -> re.Pattern:
    """Turn '/api/urls/{code}' into a regex with a named group per parameter."""
    parts = _PARAM.split(pattern)
    # Even indices are literal text, odd indices are parameter names
    regex = ''.join(re.escape(part) if i % 2 == 0 else f'(?P<{part}>[^/]+)' for i, part in enumerate(parts))
    return re.compile(f'^{regex}$')


@dataclass(frozen=True)
class Route:
    method: str
    pattern: str
    handler: Handler
    public: bool = False
    regex: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, 'regex', compile_pattern(self.pattern))

    def match(self, method: str, path: str) -> dict[str, str] | None:
        if method != self.method:
            return None
        found = self.regex.match(path)
        if found is None:
            return None
        return {name: unquote(value) for name, value in found.groupdict().items()}


class Router:
    def __init__(self):
        self.routes: list[Route] = []

    def add(self, method: str, pattern: str, handler: Handler, *, public: bool = False) -> 'Router':
        self.routes.append(Route(method=method.upper(), pattern=pattern, handler=handler, public=public))
        return self

    def resolve(self, method: str, path: str) -> tuple[Route, dict[str, str]] | None:
        for route in self.routes:
            params = route.match(method, path)
            if params is not None:
                return route, params
        return None

    def dispatch(self, request: Request, context: HandlerContext) -> LambdaResponse:
        """Route a request through the auth gate to its handler.

        HTTPError subclasses raised by handlers become JSON error responses and
        DataStoreError becomes a 503. Anything else propagates.
        """
        resolved = self.resolve(request.method, request.path)
        if resolved is None:
            return response_404()

        route, params = resolved
        request = request.with_path_params(params)

        try:
            verdict = context.gate.authorize(request, public=route.public)
            if isinstance(verdict, Deny):
                return response_401(verdict.reason)
            return route.handler(request, context)
        except HTTPError as e:
            logger.info(
                'Request failed. Responding with %s.',
                e.status_code,
                extra={'error': e.error_code, 'method': request.method, 'path': request.path},
            )
            return error_response(e)
        except DataStoreError:
            logger.exception('Data store unavailable. Responding with 503.', extra={'path': request.path})
            return response_503()
