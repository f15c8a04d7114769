"""Engine and connection factory.

Resolves a named profile from db.toml into a SQLAlchemy ``Engine`` and
hands out ``SqlAlchemyDatabase`` handles bound to a transaction.

Usage:
    from db_mapper.factory import connect, get_engine

    engine = get_engine("local")          # or DB_PROFILE=local
    with connect(engine) as db:
        users.insert(db, {"email": "a@x.com"})
"""

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from urllib.parse import quote

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from db_mapper.adapters.sqla import SqlAlchemyDatabase
from db_mapper.config.loader import load_config
from db_mapper.config.models import DatabaseProfile, MapperConfig
from db_mapper.errors import ProfileNotFoundError
from db_mapper.naming import Naming

logger = logging.getLogger(__name__)

PROFILE_ENV_VAR = "DB_PROFILE"


def resolve_url(profile: DatabaseProfile) -> str:
    """Resolve profile URL with password substitution.

    Args:
        profile: Database profile from config

    Returns:
        Connection URL with password substituted

    Example:
        >>> resolve_url(DatabaseProfile(url="postgresql://u:[YOUR-PASSWORD]@h/db", db_password="p@ss"))
        'postgresql://u:p%40ss@h/db'
    """
    url = profile.url
    if profile.db_password and "[YOUR-PASSWORD]" in url:
        url = url.replace("[YOUR-PASSWORD]", quote(profile.db_password, safe=""))
    return url


def get_active_profile_name() -> str:
    """Get active profile name from the ``DB_PROFILE`` environment variable.

    Raises:
        ProfileNotFoundError: If no profile is configured
    """
    profile_name = os.environ.get(PROFILE_ENV_VAR)
    if profile_name:
        return profile_name
    raise ProfileNotFoundError(
        "No database profile configured.\n"
        f"Set {PROFILE_ENV_VAR}=<name> or pass a profile name explicitly."
    )


def get_profile(
    profile_name: str | None = None,
    config: MapperConfig | None = None,
) -> tuple[str, DatabaseProfile]:
    """Get profile name and configuration.

    Raises:
        ProfileNotFoundError: If no profile is configured or the name is unknown
        FileNotFoundError: If *config* is omitted and db.toml is missing
    """
    if profile_name is None:
        profile_name = get_active_profile_name()
    if config is None:
        config = load_config()

    if profile_name not in config.profiles:
        available = ", ".join(config.profiles.keys()) or "(none)"
        raise ProfileNotFoundError(
            f"Profile '{profile_name}' not found in db.toml.\n"
            f"Available profiles: {available}"
        )
    return profile_name, config.profiles[profile_name]


def get_engine(
    profile_name: str | None = None,
    config: MapperConfig | None = None,
    **engine_kwargs,
) -> Engine:
    """Create a SQLAlchemy engine for a profile.

    Args:
        profile_name: Profile from db.toml; defaults to ``DB_PROFILE``.
        config: Loaded configuration; defaults to ``load_config()``.
        **engine_kwargs: Forwarded to ``sqlalchemy.create_engine``.
    """
    profile_name, profile = get_profile(profile_name, config)
    logger.info(f"Creating engine for profile '{profile_name}'")
    return create_engine(resolve_url(profile), **engine_kwargs)


@contextmanager
def connect(engine: Engine) -> Iterator[SqlAlchemyDatabase]:
    """Yield a ``SqlAlchemyDatabase`` inside ``engine.begin()``.

    Commits when the block exits normally, rolls back on error.
    """
    with engine.begin() as conn:
        yield SqlAlchemyDatabase(conn)


def get_naming(config: MapperConfig | None = None) -> Naming:
    """Build the ``Naming`` described by *config* (defaults when omitted)."""
    if config is None:
        return Naming()
    return Naming(config.naming)
