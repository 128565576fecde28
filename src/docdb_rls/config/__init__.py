"""Configuration module for docdb-rls."""

from __future__ import annotations

from docdb_rls.config._config import RLSConfig, configure, get_global_config

__all__ = ["RLSConfig", "configure", "get_global_config"]
