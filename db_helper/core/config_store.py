"""Named configuration sets backed by Java-style properties files."""

from __future__ import annotations

import itertools
import os
import time
from typing import Iterator, List, Optional

from jproperties import Properties, PropertyError

from ..utils.logger import get_logger
from .errors import ConfigHelperError
from .types import ConfigSet, ConfigValues

logger = get_logger(__name__)


class ConfigStore:
    """Owns a mapping from configuration name to key/value set.

    Sets are created on first access and live as long as the store does.
    Callers share one store explicitly instead of relying on module state.
    """

    def __init__(self) -> None:
        self._configs: dict[str, ConfigSet] = {}
        self._counter = itertools.count()

    def get(
        self,
        name: Optional[str] = None,
        defaults: Optional[ConfigValues] = None,
        file_path: Optional[str | os.PathLike[str]] = None,
    ) -> ConfigSet:
        """Return the named set, creating it when absent.

        Args:
            name: Set name. `None` creates a set under a generated name.
            defaults: Values merged into the set, overwriting existing keys.
            file_path: Properties file loaded after `defaults`, overwriting
                again. Ignored when `None` or when the file does not exist.

        Raises:
            ConfigHelperError: The file exists but cannot be opened or parsed.
        """

        if name is None:
            name = self._auto_name()
        config = self._configs.get(name)
        if config is None:
            config = self._new(name)

        if defaults:
            config.update({str(key): str(value) for key, value in defaults.items()})

        if file_path is not None:
            config.update(_load_properties(file_path))

        return config

    def create(
        self,
        name: str,
        values: Optional[ConfigValues] = None,
        file_path: Optional[str | os.PathLike[str]] = None,
    ) -> ConfigSet:
        """Discard any set stored under `name` and build a fresh one."""

        self._new(name)
        return self.get(name, values, file_path)

    def remove(self, name: str) -> None:
        self._configs.pop(name, None)

    def exists(self, name: str) -> bool:
        return name in self._configs

    def names(self) -> List[str]:
        return list(self._configs)

    def __contains__(self, name: object) -> bool:
        return name in self._configs

    def __len__(self) -> int:
        return len(self._configs)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._configs))

    def _new(self, name: str) -> ConfigSet:
        config: ConfigSet = {}
        self._configs[name] = config
        return config

    def _auto_name(self) -> str:
        millis = int(time.time() * 1000)
        return f"auto_{millis}_{next(self._counter)}"


def _load_properties(file_path: str | os.PathLike[str]) -> ConfigSet:
    path = os.fspath(file_path)
    if not os.path.isfile(path) or not os.access(path, os.R_OK):
        logger.debug("Properties file %s is absent or unreadable; skipping", path)
        return {}

    props = Properties()
    try:
        with open(path, "rb") as fh:
            props.load(fh, "iso-8859-1")
    except OSError as exc:
        raise ConfigHelperError(f"Cannot open properties file {path!r}", exc) from exc
    except (PropertyError, UnicodeDecodeError) as exc:
        raise ConfigHelperError(f"Cannot parse properties file {path!r}", exc) from exc

    logger.debug("Loaded %d properties from %s", len(props.properties), path)
    return {str(key): str(value) for key, value in props.properties.items()}
