from edgeshortener.dao.base.short_url_base_dao import ShortURLBaseDAO
from edgeshortener.dao.base.session_base_dao import SessionBaseDAO
from edgeshortener.dao.base.oauth_transaction_base_dao import OAuthTransactionBaseDAO
from edgeshortener.dao.base.keyspace_base_dao import KeyspaceBaseDAO


__all__ = [
    'ShortURLBaseDAO',
    'SessionBaseDAO',
    'OAuthTransactionBaseDAO',
    'KeyspaceBaseDAO',
]
