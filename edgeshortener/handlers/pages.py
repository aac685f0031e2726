"""Static HTML pages.

The admin page is a thin client: it reads `?token=` after an OAuth login,
keeps the bearer token in localStorage and talks to the JSON API.
"""

from edgeshortener.types import LambdaResponse
from edgeshortener.web.request import Request
from edgeshortener.web.context import HandlerContext
from edgeshortener.web.responses import html_response


INDEX_HTML = """<!doctype html>
<html lang="en">
<head><meta charset="utf-8"><title>hop</title></head>
<body>
<main id="app">
  <form id="shorten"><input name="url" placeholder="https://..." required><input name="slug" placeholder="slug"><button>Shorten</button></form>
  <ul id="urls"></ul>
</main>
<script>
  const params = new URLSearchParams(location.search);
  if (params.has('token')) {
    localStorage.setItem('token', params.get('token'));
    history.replaceState(null, '', location.pathname);
  }
  const token = localStorage.getItem('token');
  if (!token) location.href = 'login';
  const api = (path, init = {}) => fetch(path, {...init, headers: {...init.headers, Authorization: `Bearer ${token}`}})
    .then((r) => { if (r.status === 401) { localStorage.removeItem('token'); location.href = 'login'; } return r.json(); });
  const render = () => api('api/urls').then(({urls}) => {
    document.getElementById('urls').innerHTML = urls.map((u) => `<li>${u.shortCode} &rarr; ${u.url}</li>`).join('');
  });
  document.getElementById('shorten').addEventListener('submit', (e) => {
    e.preventDefault();
    const data = Object.fromEntries(new FormData(e.target));
    if (!data.slug) delete data.slug;
    api('api/shorten', {method: 'POST', body: JSON.stringify(data)}).then(render);
  });
  render();
</script>
</body>
</html>
"""

LOGIN_HTML = """<!doctype html>
<html lang="en">
<head><meta charset="utf-8"><title>hop - sign in</title></head>
<body>
<main>
  <p id="error" hidden></p>
  <a href="api/login">Sign in</a>
</main>
<script>
  const error = new URLSearchParams(location.search).get('error');
  if (error) { const el = document.getElementById('error'); el.textContent = `Sign in failed: ${error}`; el.hidden = false; }
</script>
</body>
</html>
"""

NOT_FOUND_HTML = """<!doctype html>
<html lang="en">
<head><meta charset="utf-8"><title>hop - not found</title></head>
<body><main><h1>404</h1><p>This short link doesn't exist.</p></main></body>
</html>
"""


def index(request: Request, context: HandlerContext) -> LambdaResponse:
    return html_response(INDEX_HTML)


def login_page(request: Request, context: HandlerContext) -> LambdaResponse:
    return html_response(LOGIN_HTML)


def not_found_page() -> LambdaResponse:
    return html_response(NOT_FOUND_HTML, status=404)
