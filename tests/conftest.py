"""Shared fixtures.

FakeRedis keeps just enough of the redis-py client surface (decoded responses)
for the DAOs to run against real data structures in memory.
"""

import fnmatch
from types import SimpleNamespace

import pytest
import redis

from edgeshortener.constants import ENV, AuthMode
from edgeshortener.utils.config import Settings
from edgeshortener.utils.background import BackgroundTasks


class FakePipeline:
    """Queues commands until `execute`. Between `watch` and `multi` commands run immediately."""

    def __init__(self, client: 'FakeRedis', transaction: bool = True):
        self.client = client
        self.transaction = transaction
        self.commands = []
        self.watched = {}
        self.immediate = False

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.reset()
        return False

    def __getattr__(self, name):
        method = getattr(self.client, name)
        if self.immediate:
            return method

        def queue(*args, **kwargs):
            self.commands.append((method, args, kwargs))
            return self

        return queue

    def reset(self):
        self.commands.clear()
        self.watched.clear()
        self.immediate = False

    def watch(self, *keys):
        self.watched.update({key: self.client.snapshot(key) for key in keys})
        self.immediate = True
        return True

    def multi(self):
        self.immediate = False

    def execute(self, raise_on_error: bool = True) -> list:
        changed = any(self.client.snapshot(key) != value for key, value in self.watched.items())
        if changed:
            self.reset()
            raise redis.exceptions.WatchError('Watched variable changed.')

        results = []
        for method, args, kwargs in self.commands:
            try:
                results.append(method(*args, **kwargs))
            except redis.exceptions.ResponseError as e:
                if raise_on_error:
                    raise
                results.append(e)
        self.reset()
        return results


class FakeRedis:
    def __init__(self):
        self.data = {}
        self.ttls = {}
        self.connection_pool = SimpleNamespace(connection_kwargs={'host': 'redis.test', 'port': 6379, 'db': 0})
        self.pipelines = []

    def ping(self):
        return True

    def pipeline(self, transaction: bool = True) -> FakePipeline:
        pipe = FakePipeline(self, transaction=transaction)
        self.pipelines.append(pipe)
        return pipe

    def snapshot(self, key):
        value = self.data.get(key)
        return dict(value) if isinstance(value, dict) else value

    def get(self, key):
        value = self.data.get(key)
        if isinstance(value, dict):
            raise redis.exceptions.ResponseError('WRONGTYPE Operation against a key holding the wrong kind of value')
        return value

    def set(self, key, value, ex=None):
        self.data[key] = str(value)
        if ex is not None:
            self.ttls[key] = ex
        else:
            self.ttls.pop(key, None)
        return True

    def delete(self, *keys):
        deleted = 0
        for key in keys:
            if key in self.data:
                del self.data[key]
                self.ttls.pop(key, None)
                deleted += 1
        return deleted

    def exists(self, *keys):
        return sum(key in self.data for key in keys)

    def incr(self, key):
        value = int(self.get(key) or 0) + 1
        self.data[key] = str(value)
        return value

    def _hash(self, key, create: bool = False) -> dict:
        value = self.data.get(key)
        if value is None:
            if not create:
                return {}
            value = self.data[key] = {}
        if not isinstance(value, dict):
            raise redis.exceptions.ResponseError('WRONGTYPE Operation against a key holding the wrong kind of value')
        return value

    def hgetall(self, key):
        return dict(self._hash(key))

    def hget(self, key, field):
        return self._hash(key).get(field)

    def hset(self, key, field, value):
        record = self._hash(key, create=True)
        added = field not in record
        record[field] = str(value)
        return int(added)

    def hsetnx(self, key, field, value):
        record = self._hash(key, create=True)
        if field in record:
            return 0
        record[field] = str(value)
        return 1

    def scan(self, cursor=0, match=None, count=None):
        keys = sorted(key for key in self.data if fnmatch.fnmatchcase(key, match or '*'))
        count = count or 10
        page = keys[cursor : cursor + count]
        next_cursor = cursor + count
        return (0 if next_cursor >= len(keys) else next_cursor), page


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep tests independent from the developer's shell."""
    for name in (
        ENV.App.APP_NAME,
        ENV.App.APP_ENV,
        ENV.App.AWS_SAM_LOCAL,
        ENV.App.SHORTCODE_SALT,
        ENV.Auth.MODE,
        ENV.Auth.API_KEY,
        ENV.Auth.API_KEY_SECRET,
        ENV.Auth.ADMIN_PASSWORD_HASH,
        ENV.Auth.PUBLIC_HOST,
        ENV.OAuth.PROVIDER_URL,
        ENV.OAuth.CLIENT_ID,
        ENV.OAuth.CLIENT_SECRET,
        ENV.OAuth.CLIENT_SECRET_NAME,
        ENV.OAuth.SCOPES,
        ENV.OAuth.ALLOWED_ROLES,
        ENV.Redis.URL,
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def background():
    tasks = BackgroundTasks()
    yield tasks
    tasks.join(timeout=5)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        auth_mode=AuthMode.OAUTH,
        api_key='test-api-key',
        oauth_provider_url='https://idp.test',
        oauth_client_id='hop',
        oauth_client_secret='client-secret',
    )
