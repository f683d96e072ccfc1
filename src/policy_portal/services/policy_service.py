"""Policy service with validation and audit logs."""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from typing import Any, Callable

from policy_portal.core.validation import validate_policy
from policy_portal.models.policy import PolicyRecord, new_policy_id
from policy_portal.repositories.audit_repository import AuditRepository
from policy_portal.repositories.policy_repository import PolicyRepository

logger = logging.getLogger(__name__)


class PolicyService:
    """Coordinates policy use cases over the persisted collection."""

    def __init__(
        self,
        policy_repo: PolicyRepository,
        audit_repo: AuditRepository,
        id_factory: Callable[[], str] = new_policy_id,
    ):
        self._policy_repo = policy_repo
        self._audit_repo = audit_repo
        self._id_factory = id_factory

    def list_policies(self) -> list[PolicyRecord]:
        """Return every policy in stored order."""
        return self._policy_repo.list_policies()

    def get_policy(self, policy_id: str) -> PolicyRecord:
        for policy in self._policy_repo.list_policies():
            if policy.id == policy_id:
                return policy
        raise ValueError("Policy not found.")

    def create_policy(self, record: PolicyRecord) -> PolicyRecord:
        """Validate, assign a new identifier, append, and audit."""
        validate_policy(record)
        policies = self._policy_repo.list_policies()
        existing_ids = {policy.id for policy in policies}
        policy_id = self._id_factory()
        while not policy_id or policy_id in existing_ids:
            policy_id = self._id_factory()

        created = replace(record, id=policy_id)
        self._policy_repo.save_policies(policies + [created])
        self._audit_repo.add_log(
            "CREATE",
            "policy",
            policy_id,
            json.dumps({"event": "policy created", "after": created.to_dict()}, ensure_ascii=False),
        )
        logger.info("Created policy %s for %s", policy_id, created.customer_name)
        return created

    def update_policy(self, record: PolicyRecord) -> PolicyRecord:
        """Validate and replace the policy with the same identifier in place."""
        validate_policy(record)
        policies = self._policy_repo.list_policies()
        for index, policy in enumerate(policies):
            if policy.id == record.id:
                before = policy.to_dict()
                policies[index] = record
                break
        else:
            raise ValueError("Policy to update was not found.")

        self._policy_repo.save_policies(policies)
        self._audit_repo.add_log(
            "UPDATE",
            "policy",
            record.id,
            json.dumps(
                {"event": "policy updated", "changes": self._diff(before, record.to_dict())},
                ensure_ascii=False,
            ),
        )
        logger.info("Updated policy %s", record.id)
        return record

    def delete_policy(self, policy_id: str) -> None:
        """Remove exactly one policy by identifier."""
        policies = self._policy_repo.list_policies()
        remaining = [policy for policy in policies if policy.id != policy_id]
        if len(remaining) == len(policies):
            raise ValueError("Policy to delete was not found.")

        before = next(policy for policy in policies if policy.id == policy_id)
        self._policy_repo.save_policies(remaining)
        self._audit_repo.add_log(
            "DELETE",
            "policy",
            policy_id,
            json.dumps({"event": "policy deleted", "before": before.to_dict()}, ensure_ascii=False),
        )
        logger.info("Deleted policy %s", policy_id)

    def delete_all(self) -> int:
        """Remove every policy and return how many were removed."""
        count = len(self._policy_repo.list_policies())
        self._policy_repo.save_policies([])
        self._audit_repo.add_log("DELETE", "policy", None, f"all policies deleted count={count}")
        logger.info("Deleted all %d policies", count)
        return count

    @staticmethod
    def _diff(before: dict[str, Any], after: dict[str, Any]) -> dict[str, dict[str, Any]]:
        """Return changed fields for audit logs."""
        changes: dict[str, dict[str, Any]] = {}
        for key in sorted(set(before) | set(after)):
            old = before.get(key, "")
            new = after.get(key, "")
            if old != new:
                changes[key] = {"before": old, "after": new}
        return changes
