import json

import pytest

from edgeshortener.web.request import Request
from edgeshortener.lambdas.edge_router.app import build_context


@pytest.fixture
def context(settings, fake_redis, background):
    """Handler context wired over the in-memory Redis double."""
    return build_context(settings, fake_redis, background)


@pytest.fixture
def make_request():
    def _make_request(method='GET', path='/', *, body=None, query=None, path_params=None, token=None) -> Request:
        headers = {'authorization': f'Bearer {token}'} if token else {}
        if body is not None and not isinstance(body, str):
            body = json.dumps(body)
        return Request(
            method=method,
            path=path,
            origin='https://hop.test',
            headers=headers,
            query=query or {},
            body=body,
            path_params=path_params or {},
        )

    return _make_request
