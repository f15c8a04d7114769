"""Configuration management: profiles, naming options, TOML loading.

Usage:
    >>> from db_mapper.config import load_config, DatabaseProfile, MapperConfig
"""

from db_mapper.config.loader import load_config
from db_mapper.config.models import DatabaseProfile, MapperConfig, NamingConfig

__all__ = ["load_config", "DatabaseProfile", "MapperConfig", "NamingConfig"]
