"""Capability hooks (security labels, directory creation) based on pluggy."""

from __future__ import annotations

from ._markers import ENTRY_POINT_GROUP, PLUGIN_NAMESPACE, hookimpl, hookspec
from .manager import (
    PluginRegistrationError,
    create_plugin_manager,
    get_plugin_manager,
    register_modules,
    reset_plugin_manager_cache,
)

__all__ = [
    "ENTRY_POINT_GROUP",
    "PLUGIN_NAMESPACE",
    "PluginRegistrationError",
    "create_plugin_manager",
    "get_plugin_manager",
    "hookimpl",
    "hookspec",
    "register_modules",
    "reset_plugin_manager_cache",
]
