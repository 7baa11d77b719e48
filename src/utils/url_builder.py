"""
Database URL utilities
"""
from urllib.parse import urlsplit, urlunsplit, parse_qsl, urlencode


def build_async_url(sync_url: str) -> str:
    """
    Rewrite a postgres:// URL for the asyncpg driver

    asyncpg rejects sslmode in the query string, so it is dropped here and
    handled through connect_args instead.

    Args:
        sync_url: Database URL as copied from the Supabase dashboard

    Returns:
        postgresql+asyncpg:// URL, or the input unchanged for other schemes
    """
    if not sync_url:
        return sync_url

    parts = urlsplit(sync_url)
    base_scheme = parts.scheme.split("+")[0]
    if not base_scheme.startswith("postgres"):
        return sync_url

    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    return urlunsplit(("postgresql+asyncpg", parts.netloc, parts.path, urlencode(query), parts.fragment))


def use_session_pooler(database_url: str) -> str:
    """
    Point a Supabase pooler URL at the session pooler (port 5432)

    The transaction pooler on 6543 does not support prepared statements,
    which asyncpg relies on.
    """
    if not database_url:
        return database_url

    if ":6543" in database_url:
        print("Using Supabase session pooler (5432) instead of transaction pooler (6543)")
        return database_url.replace(":6543", ":5432")
    if ".pooler.supabase.com" in database_url and ".pooler.supabase.com:" not in database_url:
        print("Adding session pooler port (5432) to Supabase URL")
        return database_url.replace(".pooler.supabase.com", ".pooler.supabase.com:5432")
    return database_url


def redact_url(database_url: str) -> str:
    """Database URL with the password masked, for log output"""
    parts = urlsplit(database_url or "")
    if not parts.password:
        return database_url
    netloc = parts.netloc.replace(f":{parts.password}@", ":***@")
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))
