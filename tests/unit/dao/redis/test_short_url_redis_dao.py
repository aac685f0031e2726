"""Unit tests for the ShortURLRedisDAO

Test coverage includes:

1. Insertion behavior
   - Validates inserting stores the URL and creation time under the bare code.
   - Ensures invalid types raise BeartypeCallHintParamViolation.
   - Confirms duplicate shortcodes raise ShortURLAlreadyExistsError.
   - Confirms Redis connection errors raise DataStoreError.

2. Retrieval behavior
   - Ensures fetching valid shortcodes returns a populated ShortURLModel.
   - Confirms missing keys raise ShortURLNotFoundError.
   - Ensures batch retrieval skips missing and foreign keys.

3. Update and deletion
   - Ensures updates keep the original creation time.
   - Confirms missing keys raise ShortURLNotFoundError.
   - Ensures an update racing a delete doesn't bring the link back.

4. Counter operations
"""

from datetime import datetime, UTC
from unittest.mock import MagicMock

import pytest
import redis
from beartype.roar import BeartypeCallHintParamViolation
from freezegun import freeze_time

from edgeshortener.models import ShortURLModel
from edgeshortener.dao.exceptions import DataStoreError, ShortURLAlreadyExistsError, ShortURLNotFoundError
from edgeshortener.dao.redis import ShortURLRedisDAO


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture
def app_prefix():
    """Provide a consistent Redis key prefix for testing."""
    return 'testapp:test'


@pytest.fixture
def redis_client():
    """Mock a Redis pipeline-compatible client."""
    _redis_client = MagicMock(spec=redis.client.Pipeline)
    _redis_client.connection_pool = MagicMock(spec=redis.ConnectionPool, connection_kwargs={'host': 'redis.test', 'port': 6379, 'db': 0})
    _redis_client.pipeline.return_value = _redis_client
    _redis_client.__enter__.return_value = _redis_client
    _redis_client.__exit__.return_value = None
    return _redis_client


@pytest.fixture
def dao(redis_client, app_prefix):
    return ShortURLRedisDAO(redis_client=redis_client, prefix=app_prefix)


@pytest.fixture
def store(fake_redis, app_prefix):
    """DAO backed by the in-memory Redis double."""
    return ShortURLRedisDAO(redis_client=fake_redis, prefix=app_prefix)


# -------------------------------
# 1. Insertion behavior
# -------------------------------


@freeze_time('2025-10-15')
def test_insert_short_url(dao, redis_client):
    """Ensure insertion claims the code with HSETNX, then records the creation time."""
    redis_client.hsetnx.return_value = 1
    created_ms = int(datetime(2025, 10, 15, tzinfo=UTC).timestamp() * 1000)

    short_url = dao.insert(ShortURLModel(target='https://example.com/test', shortcode='abc123'))

    redis_client.hsetnx.assert_called_once_with('testapp:test:abc123', 'url', 'https://example.com/test')
    redis_client.hset.assert_called_once_with('testapp:test:abc123', 'created', created_ms)
    assert short_url.created_at == datetime(2025, 10, 15, tzinfo=UTC)


def test_insert_short_url_with_invalid_type(dao):
    """Ensure inserting invalid types raises a Beartype error."""
    with pytest.raises((TypeError, BeartypeCallHintParamViolation)):
        dao.insert('https://example.com/notamodel')


def test_insert_existing_shortcode(dao, redis_client):
    redis_client.hsetnx.return_value = 0

    with pytest.raises(ShortURLAlreadyExistsError):
        dao.insert(ShortURLModel(target='https://example.com/test', shortcode='abc123'))
    redis_client.hset.assert_not_called()


def test_insert_never_overwrites(store, fake_redis):
    store.insert(ShortURLModel(target='https://first.example', shortcode='taken'))

    with pytest.raises(ShortURLAlreadyExistsError):
        store.insert(ShortURLModel(target='https://second.example', shortcode='taken'))
    assert store.get('taken').target == 'https://first.example'


def test_insert_with_redis_connection_error(dao, redis_client):
    redis_client.hsetnx.side_effect = redis.exceptions.ConnectionError('down')

    with pytest.raises(DataStoreError):
        dao.insert(ShortURLModel(target='https://example.com/test', shortcode='abc123'))


# -------------------------------
# 2. Retrieval behavior
# -------------------------------


def test_get_short_url(dao, redis_client):
    redis_client.hgetall.return_value = {'url': 'https://example.com/test', 'created': '1760486400000'}

    short_url = dao.get('abc123')

    redis_client.hgetall.assert_called_once_with('testapp:test:abc123')
    assert short_url == ShortURLModel(
        target='https://example.com/test',
        shortcode='abc123',
        created_at=datetime(2025, 10, 15, tzinfo=UTC),
    )


def test_get_short_url_without_created(dao, redis_client):
    """Records missing or carrying a corrupt `created` still resolve."""
    redis_client.hgetall.return_value = {'url': 'https://example.com/test', 'created': 'yesterday'}

    assert dao.get('abc123').created_at is None


def test_get_missing_short_url(dao, redis_client):
    redis_client.hgetall.return_value = {}

    with pytest.raises(ShortURLNotFoundError):
        dao.get('abc123')


def test_get_many_skips_missing_and_foreign_keys(store, fake_redis):
    store.insert(ShortURLModel(target='https://one.example', shortcode='one'))
    store.insert(ShortURLModel(target='https://two.example', shortcode='two'))
    fake_redis.set('testapp:test:plain', 'not a hash')

    result = store.get_many(['one', 'missing', 'plain', 'two'])

    assert [(short_url.shortcode, short_url.target) for short_url in result] == [
        ('one', 'https://one.example'),
        ('two', 'https://two.example'),
    ]


def test_get_many_without_shortcodes(dao, redis_client):
    assert dao.get_many([]) == []
    redis_client.pipeline.assert_not_called()


# -------------------------------
# 3. Update and deletion
# -------------------------------


def test_update_keeps_creation_time(store):
    with freeze_time('2025-10-15'):
        store.insert(ShortURLModel(target='https://old.example', shortcode='abc123'))

    with freeze_time('2025-11-01'):
        updated = store.update('abc123', 'https://new.example')

    assert updated.target == 'https://new.example'
    assert updated.created_at == datetime(2025, 10, 15, tzinfo=UTC)
    assert store.get('abc123').target == 'https://new.example'


def test_update_backfills_missing_creation_time(store, fake_redis):
    fake_redis.hset('testapp:test:legacy', 'url', 'https://old.example')

    with freeze_time('2025-11-01'):
        updated = store.update('legacy', 'https://new.example')

    assert updated.created_at == datetime(2025, 11, 1, tzinfo=UTC)


def test_update_missing_short_url(store, fake_redis):
    with pytest.raises(ShortURLNotFoundError):
        store.update('missing', 'https://new.example')
    assert 'testapp:test:missing' not in fake_redis.data


def test_update_watches_the_link_key(dao, redis_client):
    redis_client.exists.return_value = 1
    redis_client.execute.return_value = [0, 0, '1760486400000']

    updated = dao.update('abc123', 'https://new.example')

    redis_client.pipeline.assert_called_once_with(transaction=True)
    redis_client.watch.assert_called_once_with('testapp:test:abc123')
    redis_client.multi.assert_called_once()
    redis_client.hset.assert_called_once_with('testapp:test:abc123', 'url', 'https://new.example')
    assert updated.created_at == datetime(2025, 10, 15, tzinfo=UTC)


def test_update_racing_a_delete_does_not_resurrect_the_link(store, fake_redis, monkeypatch):
    store.insert(ShortURLModel(target='https://old.example', shortcode='abc123'))
    exists = fake_redis.exists

    def exists_then_deleted(*keys):
        found = exists(*keys)
        monkeypatch.setattr(fake_redis, 'exists', exists)
        fake_redis.delete(*keys)  # concurrent DELETE lands before EXEC
        return found

    monkeypatch.setattr(fake_redis, 'exists', exists_then_deleted)

    with pytest.raises(ShortURLNotFoundError):
        store.update('abc123', 'https://new.example')
    assert 'testapp:test:abc123' not in fake_redis.data


def test_delete_short_url(store, fake_redis):
    store.insert(ShortURLModel(target='https://example.com', shortcode='abc123'))

    store.delete('abc123')

    assert 'testapp:test:abc123' not in fake_redis.data
    with pytest.raises(ShortURLNotFoundError):
        store.delete('abc123')


# -------------------------------
# 4. Counter operations
# -------------------------------


def test_count(store):
    assert store.count() == 0
    assert store.count(increment=True) == 1
    assert store.count(increment=True) == 2
    assert store.count() == 2


def test_count_with_redis_connection_error(dao, redis_client):
    redis_client.incr.side_effect = redis.exceptions.TimeoutError('slow')

    with pytest.raises(DataStoreError):
        dao.count(increment=True)
