#!/usr/bin/env python3
"""
A single-file post desk: a public post list plus an admin area for writing.
"""

import os
import re
import secrets
import sqlite3
from collections import defaultdict, deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from functools import wraps
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from time import time
from typing import Callable, DefaultDict

import click
import markdown
from flask import (
    Flask,
    Response,
    abort,
    g,
    redirect,
    render_template_string,
    request,
    session,
    url_for,
)
from itsdangerous import BadSignature, SignatureExpired, TimestampSigner
from markupsafe import Markup
from werkzeug.exceptions import InternalServerError
from werkzeug.middleware.proxy_fix import ProxyFix
from werkzeug.security import check_password_hash as verify_token
from werkzeug.security import generate_password_hash as hash_token

################################################################################
# Imports & constants
################################################################################

ROOT = Path(__file__).parent
DB_FILE = Path(os.environ.get("POSTDESK_DATABASE", str(ROOT / "blog.sqlite3")))

SECRET_FILE = ROOT / ".secret_key"
SECRET_KEY = (
    SECRET_FILE.read_text().strip() if SECRET_FILE.exists() else secrets.token_hex(32)
)
if not SECRET_FILE.exists():
    SECRET_FILE.write_text(SECRET_KEY)
TOKEN_LEN = 48
LOGIN_TOKEN_MAX_AGE = 60  # seconds
signer = TimestampSigner(SECRET_KEY, salt="login-token")

SITE_NAME = os.environ.get("POSTDESK_SITE_NAME", "postdesk")
LOG_LEVEL = os.environ.get("POSTDESK_LOG_LEVEL", "INFO").upper()

NEW_SLUG = "new"  # route sentinel for the create form
ADMIN_INDEX = "/posts/admin"  # where every successful mutation lands
REQUIRED_FIELDS = {
    "title": "Title is required",
    "slug": "Slug is required",
    "markdown": "Markdown is required",
}
SLUG_TAKEN_MSG = "Slug is already taken"
SLUG_FORMAT_MSG = "Slug must be one path segment of letters, digits, - or _"
SLUG_RESERVED_MSG = "Slug is reserved"
RESERVED_SLUGS = {NEW_SLUG, "admin"}  # shadowed by admin routes
SLUG_RE = re.compile(r"[A-Za-z0-9_-]+")

MD_EXTENSIONS = [
    "pymdownx.extra",
    "pymdownx.superfences",
    "pymdownx.tilde",
    "pymdownx.magiclink",
]

try:
    __version__ = version("postdesk")
except PackageNotFoundError:
    __version__ = "0.1.0-dev"


################################################################################
# App + template filters
################################################################################
app = Flask(__name__)
app.url_map.strict_slashes = False
app.config.update(SECRET_KEY=SECRET_KEY, DATABASE=str(DB_FILE), SITE_NAME=SITE_NAME)
app.config.update(
    SESSION_COOKIE_SAMESITE="Lax",  # blocks most CSRF on simple links
    SESSION_COOKIE_HTTPONLY=True,
    SESSION_COOKIE_SECURE=True,
    LOGIN_TOKEN_MAX_AGE=LOGIN_TOKEN_MAX_AGE,
)
app.logger.setLevel(LOG_LEVEL)
app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)


def _markdown_renderer():
    return markdown.Markdown(extensions=MD_EXTENSIONS)


md = _markdown_renderer()


def render_markdown_html(text: str | None) -> str:
    """Convert a post body to HTML with the shared renderer."""
    md.reset()
    return md.convert(text or "")


@app.template_filter("md")
def md_filter(text: str | None) -> Markup:
    return Markup(render_markdown_html(text))


###############################################################################
# Database helpers
###############################################################################
def get_db():
    if "db" not in g:
        g.db = sqlite3.connect(app.config["DATABASE"])
        g.db.execute("PRAGMA foreign_keys = ON;")
        g.db.row_factory = sqlite3.Row
    return g.db


@app.teardown_appcontext
def close_db(error=None):
    db = g.pop("db", None)
    if db is not None:
        db.close()


def init_db():
    db = get_db()
    db.executescript(
        """
        ------------------------------------------------------------
        -- 1.  Accounts
        ------------------------------------------------------------
        CREATE TABLE IF NOT EXISTS user (
            id          INTEGER PRIMARY KEY,
            username    TEXT UNIQUE NOT NULL,
            token_hash  TEXT NOT NULL
        );

        ------------------------------------------------------------
        -- 2.  Posts  (id keeps insertion order for listings)
        ------------------------------------------------------------
        CREATE TABLE IF NOT EXISTS post (
            id          INTEGER PRIMARY KEY AUTOINCREMENT,
            slug        TEXT UNIQUE NOT NULL,
            title       TEXT NOT NULL,
            markdown    TEXT NOT NULL,
            created_at  TEXT NOT NULL,
            updated_at  TEXT
        );
        """
    )
    db.commit()


# -------------------------------------------------------------------------
# Time helpers
# -------------------------------------------------------------------------
def utc_now() -> datetime:
    """Return an *aware* datetime in UTC."""
    return datetime.now(timezone.utc)


def _stamp() -> str:
    return utc_now().isoformat(timespec="seconds")


###############################################################################
# Post store
###############################################################################
@dataclass(frozen=True)
class Post:
    slug: str
    title: str
    markdown: str

    @classmethod
    def from_row(cls, row) -> "Post":
        return cls(slug=row["slug"], title=row["title"], markdown=row["markdown"])


class SlugTaken(Exception):
    """Another post already lives under this slug."""

    def __init__(self, slug: str):
        super().__init__(f"Slug {slug!r} is already taken")
        self.slug = slug


def get_posts(*, db) -> list[Post]:
    rows = db.execute("SELECT slug, title, markdown FROM post ORDER BY id").fetchall()
    return [Post.from_row(r) for r in rows]


def get_post(slug: str, *, db) -> Post | None:
    row = db.execute(
        "SELECT slug, title, markdown FROM post WHERE slug=?", (slug,)
    ).fetchone()
    return Post.from_row(row) if row else None


def create_post(*, title: str, slug: str, markdown: str, db) -> Post:
    try:
        db.execute(
            "INSERT INTO post (slug, title, markdown, created_at) VALUES (?,?,?,?)",
            (slug, title, markdown, _stamp()),
        )
    except sqlite3.IntegrityError as exc:
        db.rollback()
        raise SlugTaken(slug) from exc
    db.commit()
    return Post(slug=slug, title=title, markdown=markdown)


def update_post(
    slug: str, *, title: str, new_slug: str, markdown: str, db
) -> Post | None:
    """
    Overwrite the post stored under *slug* (the current one).
    Passing a different *new_slug* renames it. Returns ``None`` when
    nothing is stored under *slug*.
    """
    try:
        cur = db.execute(
            "UPDATE post SET slug=?, title=?, markdown=?, updated_at=? WHERE slug=?",
            (new_slug, title, markdown, _stamp(), slug),
        )
    except sqlite3.IntegrityError as exc:
        db.rollback()
        raise SlugTaken(new_slug) from exc
    db.commit()
    if cur.rowcount == 0:
        return None
    return Post(slug=new_slug, title=title, markdown=markdown)


def delete_post(slug: str, *, db) -> None:
    """Unknown slugs are a no-op."""
    db.execute("DELETE FROM post WHERE slug=?", (slug,))
    db.commit()


###############################################################################
# CLI – create admin + token
###############################################################################
def _create_admin(db, *, username: str) -> str:
    handle = secrets.token_urlsafe(TOKEN_LEN)
    token = signer.sign(handle).decode()
    db.execute(
        "INSERT INTO user (username, token_hash) VALUES (?,?)",
        (username, hash_token(handle)),
    )
    db.commit()
    return token


def _rotate_token(db) -> str:
    """Generate + store a *new* one-time token, return it for display."""
    handle = secrets.token_urlsafe(TOKEN_LEN)
    token = signer.sign(handle).decode()
    db.execute("UPDATE user SET token_hash=? WHERE id=1", (hash_token(handle),))
    db.commit()
    return token


@app.cli.command("init")
@click.option(
    "--username", prompt=True, help="Admin username (will be created if DB empty)"
)
def cli_init(username: str):
    """Initialise DB *and* create the admin account."""
    init_db()  # no-op if already there
    db = get_db()
    token = _create_admin(db, username=username.strip())

    click.secho("\nAdmin created.", fg="green")
    click.echo(f"\nOne-time login token:\n\n{token}\n")
    click.echo("Paste it into the login form at /login within 1 minute.")


@app.cli.command("token")
def cli_token():
    """Rotate the admin’s one-time login token."""
    db = get_db()
    token = _rotate_token(db)

    click.secho("\nFresh login token generated.\n", fg="yellow")
    click.echo(f"{token}\n")
    click.echo("Paste it into the login form at /login within 1 minute.")


###############################################################################
# Authentication
###############################################################################
@dataclass(frozen=True)
class AdminUser:
    username: str


class Unauthorized(Exception):
    """Raised when a route needs an admin and the request has none."""


def get_optional_admin_user() -> AdminUser | None:
    """The signed-in admin, or ``None`` for anonymous visitors."""
    if not session.get("logged_in"):
        return None
    row = get_db().execute("SELECT username FROM user ORDER BY id LIMIT 1").fetchone()
    return AdminUser(username=row["username"] if row else "admin")


def validate_token(token: str, max_age: int | None = None) -> bool:
    """
    • Unsign + age-check in *one* step (`max_age` seconds).
    • Compare the payload (“handle”) against the hashed copy in the DB.
    """
    if max_age is None:
        max_age = app.config["LOGIN_TOKEN_MAX_AGE"]
    try:
        handle = signer.unsign(token, max_age=max_age).decode()
    except SignatureExpired:
        return False
    except BadSignature:
        return False

    row = get_db().execute("SELECT token_hash FROM user LIMIT 1").fetchone()
    return bool(row) and verify_token(row["token_hash"], handle)


def rate_limit(max_requests: int, window: int = 60):
    hits: DefaultDict[str, deque] = defaultdict(deque)

    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            now = time()
            # left-most entry after ProxyFix = real client
            ip = (
                request.access_route[0] if request.access_route else request.remote_addr
            ) or "unknown"

            dq = hits[ip]
            while dq and now - dq[0] > window:
                dq.popleft()

            if len(dq) >= max_requests:
                retry_after = int(window - (now - dq[0]))
                return Response(
                    "Too many requests – try again later.",
                    status=429,
                    headers={"Retry-After": str(retry_after)},
                )

            dq.append(now)
            return view(*args, **kwargs)

        return wrapped

    return decorator


def _csrf_token() -> str:
    """One token per session (rotates when the cookie does)."""
    return session.get("csrf", "")


app.jinja_env.globals["csrf_token"] = _csrf_token
app.jinja_env.globals["site_name"] = lambda: app.config["SITE_NAME"]
app.jinja_env.globals["logged_in"] = lambda: bool(session.get("logged_in"))
app.jinja_env.globals["version"] = __version__


SAFE_METHODS = {"GET", "HEAD", "OPTIONS", "TRACE"}


@app.before_request
def csrf_protect():
    if request.method in SAFE_METHODS:
        return

    # no logged-in flag yet ⇒ allow (covers /login POST)
    if not session.get("logged_in"):
        return

    token = session.get("csrf", "")
    sent = request.form.get("csrf") or request.headers.get("X-CSRFToken", "")
    if not token or not secrets.compare_digest(token, sent):
        abort(403)


@app.after_request
def sec_headers(resp):
    resp.headers.update(
        {
            "X-Frame-Options": "DENY",
            "X-Content-Type-Options": "nosniff",
            "Referrer-Policy": "strict-origin-when-cross-origin",
        }
    )
    return resp


###############################################################################
# Request handling
###############################################################################
@dataclass
class RequestContext:
    """Everything a handler may look at, gathered once per request."""

    params: dict[str, str]
    form: dict[str, str] = field(default_factory=dict)
    admin: AdminUser | None = None


def build_context(**params: str) -> RequestContext:
    return RequestContext(
        params=dict(params),
        form=request.form.to_dict(),
        admin=get_optional_admin_user(),
    )


def require_admin_user(ctx: RequestContext) -> AdminUser:
    if ctx.admin is None:
        raise Unauthorized()
    return ctx.admin


class CaughtResponse:
    """A non-success outcome handed to :func:`catch_boundary`."""

    status: int = 500


@dataclass(frozen=True)
class NotFound(CaughtResponse):
    slug: str
    status = 404


class UnexpectedFailure(Exception):
    pass


@dataclass(frozen=True)
class Found:
    post: Post | None


@dataclass(frozen=True)
class Redirect:
    location: str


@dataclass(frozen=True)
class Invalid:
    errors: dict[str, str]
    values: dict[str, str]


PostLookup = Found | NotFound
FormOutcome = Redirect | Invalid | NotFound


class Intent(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"

    @classmethod
    def parse(cls, value: str | None, route_slug: str) -> "Intent":
        """
        Only ``delete`` is read from the form; the route slug picks
        between create and update.
        """
        if value == cls.DELETE.value:
            return cls.DELETE
        return cls.CREATE if route_slug == NEW_SLUG else cls.UPDATE


def validate_post_form(form: dict[str, str]) -> dict[str, str]:
    """One message per invalid field, keyed by field name."""
    errors = {name: msg for name, msg in REQUIRED_FIELDS.items() if not form.get(name)}
    slug = form.get("slug")
    if slug and "slug" not in errors:
        if slug in RESERVED_SLUGS:
            errors["slug"] = SLUG_RESERVED_MSG
        elif not SLUG_RE.fullmatch(slug):
            errors["slug"] = SLUG_FORMAT_MSG
    return errors


def _submitted_values(form: dict[str, str]) -> dict[str, str]:
    return {name: form.get(name, "") for name in REQUIRED_FIELDS}


def _create(ctx: RequestContext) -> FormOutcome:
    values = _submitted_values(ctx.form)
    errors = validate_post_form(ctx.form)
    if errors:
        return Invalid(errors=errors, values=values)

    try:
        create_post(**values, db=get_db())
    except SlugTaken:
        return Invalid(errors={"slug": SLUG_TAKEN_MSG}, values=values)

    app.logger.info("Created post %s", values["slug"])
    return Redirect(ADMIN_INDEX)


def _update(ctx: RequestContext) -> FormOutcome:
    slug = ctx.params["slug"]
    values = _submitted_values(ctx.form)
    errors = validate_post_form(ctx.form)
    if errors:
        return Invalid(errors=errors, values=values)

    try:
        post = update_post(
            slug,
            title=values["title"],
            new_slug=values["slug"],
            markdown=values["markdown"],
            db=get_db(),
        )
    except SlugTaken:
        return Invalid(errors={"slug": SLUG_TAKEN_MSG}, values=values)
    if post is None:
        return NotFound(slug)

    if post.slug != slug:
        app.logger.info("Updated post %s (renamed to %s)", slug, post.slug)
    else:
        app.logger.info("Updated post %s", slug)
    return Redirect(ADMIN_INDEX)


def _delete(ctx: RequestContext) -> FormOutcome:
    slug = ctx.params["slug"]
    delete_post(slug, db=get_db())
    app.logger.info("Deleted post %s", slug)
    return Redirect(ADMIN_INDEX)


INTENT_HANDLERS: dict[Intent, Callable[[RequestContext], FormOutcome]] = {
    Intent.CREATE: _create,
    Intent.UPDATE: _update,
    Intent.DELETE: _delete,
}
if set(INTENT_HANDLERS) != set(Intent):
    raise RuntimeError("every intent needs a handler")


def dispatch_intent(intent: Intent, ctx: RequestContext) -> FormOutcome:
    return INTENT_HANDLERS[intent](ctx)


def load_post_form(ctx: RequestContext) -> PostLookup:
    """
    Read phase of ``/posts/admin/<slug>``.

    The ``new`` sentinel yields an empty form; any other slug must
    exist, otherwise the caller gets a :class:`NotFound` back.
    """
    require_admin_user(ctx)
    slug = ctx.params["slug"]
    if slug == NEW_SLUG:
        return Found(post=None)

    post = get_post(slug, db=get_db())
    return Found(post=post) if post else NotFound(slug)


def submit_post_form(ctx: RequestContext) -> FormOutcome:
    """
    Write phase of ``/posts/admin/<slug>``.

    Validation problems come back as :class:`Invalid` and never touch
    the store; successful mutations end in a :class:`Redirect`.
    """
    require_admin_user(ctx)
    intent = Intent.parse(ctx.form.get("intent"), ctx.params["slug"])
    return dispatch_intent(intent, ctx)


def catch_boundary(caught: CaughtResponse):
    """Render a 404 for missing posts; anything else is a bug."""
    if isinstance(caught, NotFound):
        return render_template_string(TEMPL_POST_404, slug=caught.slug), 404
    raise UnexpectedFailure(
        f"Unsupported thrown response status code: {caught.status}"
    )


###############################################################################
# Templates
###############################################################################
def wrap(body: str) -> str:
    """Glue prolog + page-specific body + epilog."""
    return TEMPL_PROLOG + body + TEMPL_EPILOG


TEMPL_PROLOG = """
<!doctype html>
<html lang="en">
<title>{{ title or site_name() }}</title>
<meta name="viewport" content="width=device-width, initial-scale=1">
<meta charset="utf-8">
<style>
html{font-size:62.5%;font-family:-apple-system,BlinkMacSystemFont,"Segoe UI",Roboto,"Helvetica Neue",Arial,sans-serif}
body{font-size:1.8rem;line-height:1.618;max-width:38em;margin:auto;color:#c9c9c9;background-color:#222222;padding:13px}
a{color:#ffffff;text-underline-offset:0.18em}
pre{background-color:#4a4a4a;padding:1em;overflow-x:auto}
code{font-size:0.9em;background-color:#4a4a4a}
input,textarea{width:100%;color:#c9c9c9;padding:6px 10px;margin-bottom:10px;background-color:#4a4a4a;border:1px solid #4a4a4a;border-radius:4px;box-sizing:border-box}
textarea{font-family:monospace}
label{display:block;font-weight:600}
button{padding:5px 10px;background-color:#ffffff;color:#222222;border:1px solid #ffffff;border-radius:1px;cursor:pointer}
button.danger{background:#c00;color:#fff;border-color:#c00}
.error{color:#f66;font-weight:normal}
.nav{display:flex;justify-content:space-between;align-items:baseline}
</style>
<body>
<div class="container">
    <div class="nav">
        <h1 style="margin:0;"><a href="{{ url_for('posts_index') }}" style="text-decoration:none;">{{ site_name() }}</a></h1>
        <span>
        {% if logged_in() %}
            <a href="{{ url_for('logout') }}">Logout</a>
        {% else %}
            <a href="{{ url_for('login') }}">Login</a>
        {% endif %}
        </span>
    </div>
"""

TEMPL_EPILOG = """
    <hr>
    <small style="color:#888;">postdesk {{ version }}</small>
</div>
</body>
</html>
"""


###############################################################################
# Login / logout
###############################################################################
@app.route("/login", methods=["GET", "POST"])
@rate_limit(max_requests=5, window=60)
def login():
    token = request.form.get("token", "").strip()

    if request.method == "POST":
        if token and validate_token(token):
            # token matched → burn it right away
            db = get_db()
            db.execute(
                "UPDATE user SET token_hash=? WHERE id=1",
                (hash_token(secrets.token_hex(16)),),
            )
            db.commit()

            session.clear()
            session.permanent = True
            session["logged_in"] = True
            session["csrf"] = secrets.token_hex(16)
            app.logger.info("Admin signed in")
            return redirect(url_for("posts_index"))
        app.logger.warning("Rejected login attempt from %s", request.remote_addr)

    return render_template_string(TEMPL_LOGIN, title="Login")


TEMPL_LOGIN = wrap("""
{% block body %}
<hr>
<form method="post">
  <label for="token">Token</label>
  <input id="token" name="token" type="password" autocomplete="current-password">
  <button type="submit">Sign&nbsp;in</button>
</form>
{% endblock %}
""")


@app.route("/logout")
def logout():
    session.clear()
    return redirect(url_for("posts_index"))


@app.errorhandler(Unauthorized)
def unauthorized(exc):
    return redirect(url_for("login"))


###############################################################################
# Posts
###############################################################################
@app.route("/")
def index():
    return redirect(url_for("posts_index"))


@app.route("/posts")
def posts_index():
    posts = get_posts(db=get_db())
    return render_template_string(
        TEMPL_POSTS, posts=posts, admin=get_optional_admin_user(), title="Posts"
    )


TEMPL_POSTS = wrap("""
{% block body %}
<hr>
<h2>Posts</h2>
{% if admin %}
  <p><a href="{{ url_for('posts_admin') }}">Admin</a></p>
{% endif %}
<ul>
{% for post in posts %}
  <li><a href="{{ url_for('post_detail', slug=post.slug) }}">{{ post.title }}</a></li>
{% else %}
  <li><em>Nothing here yet.</em></li>
{% endfor %}
</ul>
{% endblock %}
""")


@app.route("/posts/<slug>")
def post_detail(slug):
    post = get_post(slug, db=get_db())
    if post is None:
        return catch_boundary(NotFound(slug))
    return render_template_string(TEMPL_POST, post=post, title=post.title)


TEMPL_POST = wrap("""
{% block body %}
<hr>
<article>
  <h2>{{ post.title }}</h2>
  <div class="e-content">{{ post.markdown|md }}</div>
</article>
{% if logged_in() %}
  <small><a href="{{ url_for('post_admin_form', slug=post.slug) }}">Edit</a></small>
{% endif %}
{% endblock %}
""")


###############################################################################
# Admin
###############################################################################
@app.route("/posts/admin")
def posts_admin():
    require_admin_user(build_context())
    posts = get_posts(db=get_db())
    return render_template_string(TEMPL_ADMIN, posts=posts, title="Admin")


TEMPL_ADMIN = wrap("""
{% block body %}
<hr>
<p>
  <a href="{{ url_for('post_admin_form', slug='new') }}">Create new post</a>
</p>
{% if posts %}
<ul>
  {% for post in posts %}
  <li><a href="{{ url_for('post_admin_form', slug=post.slug) }}">{{ post.title }}</a></li>
  {% endfor %}
</ul>
{% endif %}
{% endblock %}
""")


@app.route("/posts/admin/<slug>", methods=["GET", "POST"])
def post_admin_form(slug):
    ctx = build_context(slug=slug)

    if request.method == "POST":
        outcome = submit_post_form(ctx)
        if isinstance(outcome, Redirect):
            return redirect(outcome.location)
        if isinstance(outcome, Invalid):
            return _render_form(slug, values=outcome.values, errors=outcome.errors)
        return catch_boundary(outcome)

    lookup = load_post_form(ctx)
    if isinstance(lookup, NotFound):
        return catch_boundary(lookup)

    post = lookup.post
    values = (
        {"title": post.title, "slug": post.slug, "markdown": post.markdown}
        if post
        else {}
    )
    return _render_form(slug, values=values, errors={})


def _render_form(slug: str, *, values: dict[str, str], errors: dict[str, str]):
    is_new = slug == NEW_SLUG
    return render_template_string(
        TEMPL_POST_FORM,
        values=values,
        errors=errors,
        is_new=is_new,
        title="New post" if is_new else f"Edit {slug}",
    )


TEMPL_POST_FORM = wrap("""
{% block body %}
<hr>
<form method="post">
  {% if csrf_token() %}
  <input type="hidden" name="csrf" value="{{ csrf_token() }}">
  {% endif %}
  <p>
    <label>
      Post Title:
      {% if errors.title %}<em class="error">{{ errors.title }}</em>{% endif %}
      <input type="text" name="title" value="{{ values.title }}">
    </label>
  </p>
  <p>
    <label>
      Post Slug:
      {% if errors.slug %}<em class="error">{{ errors.slug }}</em>{% endif %}
      <input type="text" name="slug" value="{{ values.slug }}">
    </label>
  </p>
  <p>
    <label for="markdown">
      Markdown:
      {% if errors.markdown %}<em class="error">{{ errors.markdown }}</em>{% endif %}
    </label>
    <textarea id="markdown" name="markdown" rows="20">{{ values.markdown }}</textarea>
  </p>
  <div style="display:flex;justify-content:flex-end;gap:1rem;">
    {% if not is_new %}
    <button type="submit" name="intent" value="delete" class="danger">Delete</button>
    {% endif %}
    {% if is_new %}
    <button type="submit" name="intent" value="create">Create Post</button>
    {% else %}
    <button type="submit" name="intent" value="update">Update</button>
    {% endif %}
  </div>
</form>
{% endblock %}
""")


###############################################################################
# Error pages
###############################################################################
@app.errorhandler(404)
def not_found(exc):
    """Site-wide “Not Found” page."""
    return render_template_string(TEMPL_404, title="Not found"), 404


@app.errorhandler(InternalServerError)
def internal_error(exc):
    """
    Generic error boundary. Shows the failure's message when it came
    from a real exception; Flask has already logged the traceback.
    """
    original = getattr(exc, "original_exception", None)
    message = str(original) if isinstance(original, Exception) else ""
    return render_template_string(TEMPL_500, message=message, title="Error"), 500


TEMPL_404 = wrap("""
{% block body %}
  <hr>
  <h2 style="margin-top:0">Page not found</h2>
  <p>The URL you asked for doesn’t exist.
     <a href="{{ url_for('posts_index') }}">Back to the posts</a>.</p>
{% endblock %}
""")

TEMPL_POST_404 = wrap("""
{% block body %}
  <hr>
  <div>Uh oh! This post with the slug {{ slug }} does not exist</div>
{% endblock %}
""")

TEMPL_500 = wrap("""
{% block body %}
  <hr>
  <div class="error">
    Oh no, something went wrong!
    {% if message %}<pre>{{ message }}</pre>{% endif %}
  </div>
{% endblock %}
""")


###############################################################################
# main
###############################################################################
if __name__ == "__main__":
    with app.app_context():
        init_db()
    app.run(debug=True)
