"""Redis-backed storage for in-flight OAuth authorization transactions.

    <prefix>:oauth:<state>  ->  {"codeVerifier": "...", "redirectUri": "..."}   (EX 600)
"""

import json

from beartype import beartype

from edgeshortener.models import OAuthTransactionModel
from edgeshortener.dao.base import OAuthTransactionBaseDAO
from edgeshortener.dao.redis.mixins import RedisClientMixin
from edgeshortener.dao.redis.helpers import handle_redis_connection_error
from edgeshortener.dao.exceptions import OAuthTransactionNotFoundError, MalformedRecordError


class OAuthTransactionRedisDAO(RedisClientMixin, OAuthTransactionBaseDAO):
    @handle_redis_connection_error
    @beartype
    def insert(self, transaction: OAuthTransactionModel, ttl: int, **kwargs) -> OAuthTransactionModel:
        record = {'codeVerifier': transaction.code_verifier}
        if transaction.redirect_uri is not None:
            record['redirectUri'] = transaction.redirect_uri

        self.redis.set(self.keys.oauth_key(transaction.state), json.dumps(record), ex=ttl)
        return transaction

    @handle_redis_connection_error
    @beartype
    def consume(self, state: str, **kwargs) -> OAuthTransactionModel:
        """Read and delete an OAuth transaction

        NOTE: GET and DEL run in one MULTI/EXEC block so a replayed callback
              racing the original one can't recover the same code verifier.

        Raises:
            OAuthTransactionNotFoundError:
                If no transaction exists for the state (never issued, consumed or expired).
            MalformedRecordError:
                If the stored payload can't be parsed.
        """
        with self.redis.pipeline(transaction=True) as pipe:
            pipe.get(self.keys.oauth_key(state))
            pipe.delete(self.keys.oauth_key(state))
            raw, _ = pipe.execute()

        if raw is None:
            raise OAuthTransactionNotFoundError('OAuth transaction not found.')

        try:
            record = json.loads(raw)
            code_verifier = record['codeVerifier']
        except (TypeError, ValueError, KeyError) as e:
            raise MalformedRecordError('Malformed OAuth transaction record.') from e

        if not isinstance(code_verifier, str) or not code_verifier:
            raise MalformedRecordError('OAuth transaction record has no code verifier.')

        redirect_uri = record.get('redirectUri')
        return OAuthTransactionModel(
            state=state,
            code_verifier=code_verifier,
            redirect_uri=redirect_uri if isinstance(redirect_uri, str) else None,
        )
