"""Link management and redirect resolution handlers.

HTTP responses:
    POST   /api/shorten       200 {shortCode, url} | 400 | 409 {"error": "Slug already exists"}
    GET    /api/urls          200 {urls: [{shortCode, url, created}], cursor, hasMore} | 400
    PUT    /api/urls/{code}   200 {shortCode, url, created} | 400 | 404
    DELETE /api/urls/{code}   200 {success: true} | 404
    GET    /{code}, /h/{code} 302 Location: <target> | 404 HTML page
"""

import re
import logging
from datetime import datetime, UTC
from typing import Any

from edgeshortener.constants import KeyPrefix, Listing, Shortcode
from edgeshortener.models import ShortURLModel
from edgeshortener.types import LambdaResponse
from edgeshortener.exceptions import HTTPError, ValidationError, NotFoundError, ConflictError
from edgeshortener.dao.exceptions import ShortURLAlreadyExistsError, ShortURLNotFoundError
from edgeshortener.utils.helpers import split_record_key, to_epoch_ms
from edgeshortener.utils.shortener import generate_shortcode
from edgeshortener.web.request import Request
from edgeshortener.web.context import HandlerContext
from edgeshortener.web.responses import response_200, response_302
from edgeshortener.handlers.pages import not_found_page
from edgeshortener.handlers.constants import (
    SHORT_URL_CREATED,
    SHORT_URL_UPDATED,
    SHORT_URL_DELETED,
    SHORT_URL_NOT_FOUND,
    SLUG_ALREADY_EXISTS,
    SHORTCODE_COLLISION,
    REDIRECT_SUCCESS,
    URLS_LISTED,
)


logger = logging.getLogger(__name__)

SHORTCODE_RE = re.compile(Shortcode.PATTERN)


def is_shortcode(value: Any) -> bool:
    """True for strings usable as link keys: no separators, not reserved."""
    return isinstance(value, str) and bool(SHORTCODE_RE.match(value)) and value.lower() not in Shortcode.RESERVED


def _require_url(payload: dict[str, Any]) -> str:
    url = payload.get('url')
    if not isinstance(url, str) or not url.strip():
        raise ValidationError('URL is required')
    return url.strip()


def _serialize(short_url: ShortURLModel) -> dict[str, Any]:
    created_at = short_url.created_at or datetime.now(UTC)
    return {'shortCode': short_url.shortcode, 'url': short_url.target, 'created': to_epoch_ms(created_at)}


def _insert_generated(target_url: str, context: HandlerContext) -> ShortURLModel:
    """Insert under a counter-derived code, skipping codes already claimed as custom slugs."""
    for _ in range(Shortcode.MAX_GENERATION_ATTEMPTS):
        counter = context.links.count(increment=True)
        shortcode = generate_shortcode(counter, salt=context.settings.shortcode_salt, length=Shortcode.LENGTH)
        try:
            return context.links.insert(ShortURLModel(target=target_url, shortcode=shortcode))
        except ShortURLAlreadyExistsError:
            logger.warning('Generated shortcode already taken.', extra={'event': SHORTCODE_COLLISION, 'shortcode': shortcode})

    raise HTTPError('Could not allocate a short code')


def shorten(request: Request, context: HandlerContext) -> LambdaResponse:
    # 1- Extract target URL and optional slug from request body
    payload = request.json_object()
    target_url = _require_url(payload)
    slug = payload.get('slug')

    # 2- Store under the custom slug, or under a generated shortcode
    if slug:
        if not is_shortcode(slug):
            raise ValidationError('Invalid slug')
        try:
            short_url = context.links.insert(ShortURLModel(target=target_url, shortcode=slug))
        except ShortURLAlreadyExistsError as e:
            logger.info('Slug already exists. Responding with 409.', extra={'event': SLUG_ALREADY_EXISTS, 'shortcode': slug})
            raise ConflictError('Slug already exists') from e
    else:
        short_url = _insert_generated(target_url, context)

    # 3- Respond with the new mapping
    logger.info('Short URL created. Responding with 200.', extra={'event': SHORT_URL_CREATED, 'shortcode': short_url.shortcode})
    return response_200({'shortCode': short_url.shortcode, 'url': short_url.target})


def _parse_limit(raw: str | None) -> int:
    if raw is None or raw == '':
        return Listing.DEFAULT_LIMIT
    try:
        limit = int(raw)
    except ValueError as e:
        raise ValidationError('Invalid limit') from e
    return max(1, min(limit, Listing.MAX_LIMIT))


def list_urls(request: Request, context: HandlerContext) -> LambdaResponse:
    # 1- Parse pagination and search parameters
    limit = _parse_limit(request.query.get('limit'))
    cursor = request.query.get('cursor') or None
    if cursor is not None and not cursor.isdigit():
        raise ValidationError('Invalid cursor')
    search = (request.query.get('search') or '').lower()

    # 2- Enumerate one page of the shared keyspace
    listing = context.keyspace.list(limit=limit, cursor=cursor)

    # 3- Split links from sessions; OAuth transactions and internal keys are never listed
    shortcodes, session_tokens = [], []
    for name in listing.keys:
        kind, ident = split_record_key(name)
        if kind is KeyPrefix.SESSION:
            session_tokens.append(ident)
        elif kind is None and is_shortcode(name):
            shortcodes.append(name)

    # 4- Opportunistically drop dead sessions found on this page
    context.sweeper.sweep(session_tokens)

    # 5- Load link records and apply the search filter
    urls = [_serialize(short_url) for short_url in context.links.get_many(shortcodes)]
    if search:
        urls = [item for item in urls if search in item['shortCode'].lower() or search in item['url'].lower()]

    logger.debug('Listed URLs.', extra={'event': URLS_LISTED, 'count': len(urls), 'complete': listing.complete})
    return response_200({'urls': urls, 'cursor': listing.cursor, 'hasMore': not listing.complete})


def update_url(request: Request, context: HandlerContext) -> LambdaResponse:
    shortcode = request.path_params['code']
    new_url = _require_url(request.json_object())

    if not is_shortcode(shortcode):
        raise NotFoundError('Short URL not found')
    try:
        short_url = context.links.update(shortcode, new_url)
    except ShortURLNotFoundError as e:
        raise NotFoundError('Short URL not found') from e

    logger.info('Short URL updated. Responding with 200.', extra={'event': SHORT_URL_UPDATED, 'shortcode': shortcode})
    return response_200(_serialize(short_url))


def delete_url(request: Request, context: HandlerContext) -> LambdaResponse:
    shortcode = request.path_params['code']

    if not is_shortcode(shortcode):
        raise NotFoundError('Short URL not found')
    try:
        context.links.delete(shortcode)
    except ShortURLNotFoundError as e:
        raise NotFoundError('Short URL not found') from e

    logger.info('Short URL deleted. Responding with 200.', extra={'event': SHORT_URL_DELETED, 'shortcode': shortcode})
    return response_200({'success': True})


def redirect(request: Request, context: HandlerContext) -> LambdaResponse:
    shortcode = request.path_params['code']

    if not is_shortcode(shortcode):
        return not_found_page()
    try:
        short_url = context.links.get(shortcode)
    except ShortURLNotFoundError:
        logger.info('Short URL not found. Responding with 404.', extra={'event': SHORT_URL_NOT_FOUND, 'shortcode': shortcode})
        return not_found_page()

    logger.info('Redirecting client to target URL. Responding with 302.', extra={'event': REDIRECT_SUCCESS, 'shortcode': shortcode})
    return response_302(location=short_url.target)
