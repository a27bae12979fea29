"""
config.py
---------
Connection settings for `QueryExecutor`, read from the environment (and a
`.env` file when present) or from a named configuration set.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from .core.errors import DbHelperError

ENV_DRIVER = "DB_HELPER_DRIVER"
ENV_URL = "DB_HELPER_URL"
ENV_USER = "DB_HELPER_USER"
ENV_PASSWORD = "DB_HELPER_PASSWORD"


def _env(environ: Mapping[str, str], key: str) -> Optional[str]:
    value = environ.get(key)
    if value is None or not value.strip():
        return None
    return value.strip()


@dataclass(frozen=True)
class DbSettings:
    driver_name: str
    connection_url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None

    @classmethod
    def from_mapping(cls, values: Mapping[str, str], prefix: str = "db.") -> DbSettings:
        """Build settings from `<prefix>driver`, `<prefix>url`, `<prefix>user`, `<prefix>password`."""

        driver = values.get(f"{prefix}driver")
        if not driver:
            raise DbHelperError(f"Configuration key {prefix}driver is missing")
        return cls(
            driver_name=driver,
            connection_url=values.get(f"{prefix}url"),
            username=values.get(f"{prefix}user"),
            password=values.get(f"{prefix}password"),
        )


def load_settings(
    environ: Optional[Mapping[str, str]] = None,
    *,
    dotenv_path: Optional[str] = None,
) -> DbSettings:
    """Read settings from the process environment after loading `.env`.

    Passing `environ` skips `.env` loading and reads only that mapping.
    """

    if environ is None:
        load_dotenv(dotenv_path)
        environ = os.environ

    driver = _env(environ, ENV_DRIVER)
    if driver is None:
        raise DbHelperError(f"{ENV_DRIVER} is required")
    return DbSettings(
        driver_name=driver,
        connection_url=_env(environ, ENV_URL),
        username=_env(environ, ENV_USER),
        password=_env(environ, ENV_PASSWORD),
    )
