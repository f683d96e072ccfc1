"""Application dependency container."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from policy_portal.core.config import AppConfig, load_config
from policy_portal.repositories.audit_repository import AuditRepository
from policy_portal.repositories.db_pool import ThreadLocalConnection
from policy_portal.repositories.policy_repository import PolicyRepository
from policy_portal.repositories.schema import initialize_schema
from policy_portal.repositories.settings_repository import SettingsRepository
from policy_portal.repositories.store import KeyValueStore
from policy_portal.services.app_controller import AppController
from policy_portal.services.export_service import ExportService
from policy_portal.services.extraction_client import ExtractionClient
from policy_portal.services.policy_service import PolicyService


@dataclass
class ServiceContainer:
    """Wires repositories and services."""

    config: AppConfig
    controller: AppController
    policy_service: PolicyService
    export_service: ExportService
    extraction_client: ExtractionClient
    audit_repo: AuditRepository


def build_container(config: AppConfig | None = None, config_path: Path | None = None) -> ServiceContainer:
    """Build dependencies and initialize schema."""
    config = config or load_config(config_path)

    pool = ThreadLocalConnection(config.store.path)
    initialize_schema(pool)

    store = KeyValueStore(pool)
    audit_repo = AuditRepository(pool)
    policy_repo = PolicyRepository(store, config.store.policies_key)
    settings_repo = SettingsRepository(
        store,
        theme_key=config.store.theme_key,
        default_theme=config.ui.default_theme,
    )

    policy_service = PolicyService(policy_repo, audit_repo)
    controller = AppController(policy_service, settings_repo, page_size=config.ui.page_size)

    return ServiceContainer(
        config=config,
        controller=controller,
        policy_service=policy_service,
        export_service=ExportService(),
        extraction_client=ExtractionClient(
            config.extraction.endpoint,
            timeout_seconds=config.extraction.timeout_seconds,
        ),
        audit_repo=audit_repo,
    )
