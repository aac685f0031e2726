from edgeshortener.web.router import Router
from edgeshortener.handlers import auth, links, pages


def build_router() -> Router:
    """Declare the HTTP surface. Order matters only for the catch-all `/{code}`, which comes last."""
    router = Router()

    # fmt: off
    router.add('GET',    '/',                 pages.index,         public=True)
    router.add('GET',    '/login',            pages.login_page,    public=True)
    router.add('GET',    '/api/login',        auth.login_start,    public=True)
    router.add('POST',   '/api/login',        auth.login_password, public=True)
    router.add('GET',    '/api/callback',     auth.callback,       public=True)
    router.add('POST',   '/api/logout',       auth.logout,         public=True)
    router.add('GET',    '/api/urls',         links.list_urls)
    router.add('POST',   '/api/shorten',      links.shorten)
    router.add('PUT',    '/api/urls/{code}',  links.update_url)
    router.add('DELETE', '/api/urls/{code}',  links.delete_url)
    router.add('GET',    '/h/{code}',         links.redirect,      public=True)
    router.add('GET',    '/{code}',           links.redirect,      public=True)
    # fmt: on

    return router


__all__ = ['build_router']
