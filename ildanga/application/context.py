"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ildanga.application.gateway import HttpProxyGateway, LocalProxyGateway, ProxyGateway
from ildanga.application.trip_store import TripSessionStore
from ildanga.application.wizard import WizardController
from ildanga.config.settings import get_settings
from ildanga.infrastructure.trip_repository import TripStateRepository, build_trip_repository


@dataclass
class AppContext:
    repository: TripStateRepository
    store: TripSessionStore
    gateway: ProxyGateway

    def make_wizard(self) -> WizardController:
        return WizardController(self.store, self.gateway)

    def close(self) -> None:
        if isinstance(self.gateway, HttpProxyGateway):
            self.gateway.close()


def make_app_context(
    *,
    storage_path: Optional[str | Path] = None,
    api_base_url: Optional[str] = None,
    repository: Optional[TripStateRepository] = None,
    gateway: Optional[ProxyGateway] = None,
) -> AppContext:
    """Wire the store and gateway once; everything else receives them from here.

    With ``api_base_url`` the client goes through a running proxy service,
    otherwise the adapters are called in-process with local credentials.
    """
    repo = repository or build_trip_repository(storage_path)
    if gateway is None and api_base_url:
        gateway = HttpProxyGateway(api_base_url, timeout=get_settings().http_timeout_seconds * 6)
    elif gateway is None:
        gateway = LocalProxyGateway()
    return AppContext(
        repository=repo,
        store=TripSessionStore(repo),
        gateway=gateway,
    )
