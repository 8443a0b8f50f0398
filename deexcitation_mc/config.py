"""
Handler configuration.

Parameters can be given as a dictionary of strings (the form used by
event-generator pipelines, e.g. ``{"cache": "lfu", "nucleiCsv": "masses.csv"}``)
or as a YAML file with the same keys.
"""

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from deexcitation_mc.exceptions import ConfigurationError
from deexcitation_mc.physics.fermi_breakup import DEFAULT_CACHE_SIZE

SUPPORTED_CACHES = ('lfu', 'simple')

# Alternative spellings accepted in parameter maps
_ALIASES = {
    'nucleiCsv': 'nuclei_csv',
    'cacheSize': 'cache_size',
    'logLevel': 'log_level',
}


@dataclass
class HandlerConfig:
    """Settings for building an ExcitationHandler."""

    # Fermi break-up split cache: "lfu" (bounded) or "simple" (unbounded)
    cache: Optional[str] = None
    cache_size: int = DEFAULT_CACHE_SIZE

    # External nuclear mass table (CSV or .npy)
    nuclei_csv: Optional[str] = None

    seed: Optional[int] = None

    # Package logger level; None leaves the logger as setup_logging left it
    log_level: Optional[str] = None

    def __post_init__(self):
        self.validate()

    def validate(self):
        if self.cache is not None and self.cache not in SUPPORTED_CACHES:
            raise ConfigurationError('only "lfu" and "simple" caches are supported')
        if int(self.cache_size) < 1:
            raise ConfigurationError(f"cache_size must be positive, got {self.cache_size}")
        self.cache_size = int(self.cache_size)
        if self.log_level is not None:
            if not isinstance(logging.getLevelName(str(self.log_level).upper()), int):
                raise ConfigurationError(f"Unknown log level: {self.log_level}")
            self.log_level = str(self.log_level).upper()
        if self.seed is not None:
            self.seed = int(self.seed)
        if self.nuclei_csv is not None and not Path(self.nuclei_csv).exists():
            raise ConfigurationError(f"Nuclear mass file not found: {self.nuclei_csv}")

    @classmethod
    def from_dict(cls, params: Optional[Mapping[str, Any]]) -> 'HandlerConfig':
        """
        Build a configuration from a parameter map.

        Raises:
            ConfigurationError: Unknown key or invalid value
        """
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in (params or {}).items():
            name = _ALIASES.get(key, key)
            if name not in known:
                raise ConfigurationError(f"Unknown handler parameter: {key}")
            kwargs[name] = value

        try:
            return cls(**kwargs)
        except ConfigurationError:
            raise
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid handler parameters {dict(params)}: {e}") from e

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> 'HandlerConfig':
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}")

        data = yaml.safe_load(path.read_text())
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"{path} must contain a mapping of handler parameters")
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
