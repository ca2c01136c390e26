"""Runtime configuration helpers."""

from ildanga.config.settings import ProviderSnapshot, ProxySettings, get_settings, resolve_provider_snapshot

__all__ = [
    "ProviderSnapshot",
    "ProxySettings",
    "get_settings",
    "resolve_provider_snapshot",
]
