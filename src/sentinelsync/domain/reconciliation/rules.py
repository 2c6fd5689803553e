"""Analytics rules orchestrator.

Rules are processed one at a time: the rule record is written first and the
metadata record linking it to its source solution second. A failed metadata
write leaves the rule in place and is only reported as a warning.

Updating an existing rule is the one place where template content is merged
with installed state: entity mappings and custom details configured on the
installed rule survive the update.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final
from uuid import uuid4

from sentinelsync.domain.model import (
    DEFAULT_SEVERITIES,
    DeploymentOutcome,
    InstalledRule,
    ReconciliationAction,
    ResourceKind,
)
from sentinelsync.domain.ports import CatalogError

from .classify import classify
from .normalize import normalize_rule_properties
from .outcomes import (
    record_abort,
    record_failure,
    record_skip,
    record_success,
    scope_to_solutions,
    solution_sources,
)
from .policy import decide_action

if TYPE_CHECKING:
    from collections.abc import Callable, Collection, Mapping

    from sentinelsync.domain.model import (
        PlannedAction,
        RuleTemplateEntry,
        Severity,
        SolutionRef,
    )
    from sentinelsync.domain.ports import CatalogClient

    from .policy import KindPolicy

log = getLogger(__name__)

PRESERVED_RULE_FIELDS: Final[tuple[str, ...]] = ("entityMappings", "customDetails")


def _new_rule_id() -> str:
    return str(uuid4())


@dataclass(slots=True, kw_only=True)
class RuleReconciler:
    client: CatalogClient
    severities: Collection[Severity] = DEFAULT_SEVERITIES
    id_factory: Callable[[], str] = field(default=_new_rule_id)

    def run(
        self,
        policy: KindPolicy,
        *,
        solution_names: Collection[str] | None = None,
    ) -> DeploymentOutcome:
        """Reconcile rule templates, optionally scoped to the named solutions."""

        outcome = DeploymentOutcome(kind=ResourceKind.RULE)
        wanted_severities = frozenset(self.severities)
        try:
            solutions = self.client.list_catalog_solutions()
            templates = self.client.list_rule_templates(wanted_severities)
            installed = self.client.list_installed_rules()
        except CatalogError as exc:
            return record_abort(outcome, exc)

        if solution_names is not None:
            templates = scope_to_solutions(templates, solutions, solution_names)
        templates = [template for template in templates if template.severity in wanted_severities]
        sources = solution_sources(solutions)
        log.info(
            "Reconciling %s rule templates against %s installed rules",
            len(templates),
            len(installed),
        )

        for template in templates:
            planned = decide_action(classify(template, installed), policy)
            if planned.action is ReconciliationAction.SKIP:
                record_skip(outcome, planned)
                continue
            source = sources.get(template.package_id) if template.package_id else None
            self._deploy(template, planned, source, outcome)

        log.info(outcome.summary())
        return outcome

    def _deploy(
        self,
        template: RuleTemplateEntry,
        planned: PlannedAction,
        source: SolutionRef | None,
        outcome: DeploymentOutcome,
    ) -> None:
        existing = planned.status.installed
        if planned.action is ReconciliationAction.UPDATE and isinstance(existing, InstalledRule):
            rule_id = existing.id
            properties = build_rule_properties(template, preserve_from=existing.properties)
        else:
            rule_id = self.id_factory()
            properties = build_rule_properties(template)

        try:
            rule = self.client.put_rule(rule_id, template.rule_kind, properties)
        except CatalogError as exc:
            record_failure(outcome, template.display_name, exc)
            return
        record_success(outcome, planned)

        try:
            self.client.put_rule_metadata(
                rule,
                source=source,
                template_name=template.template_name,
                template_version=template.template_version,
            )
        except CatalogError as exc:
            log.warning(
                "Rule %r deployed but its metadata could not be written: %s",
                template.display_name,
                exc,
            )
            outcome.metadata_failures.append(template.display_name)


def build_rule_properties(
    template: RuleTemplateEntry,
    *,
    preserve_from: Mapping[str, object] | None = None,
) -> dict[str, object]:
    """Rule body for ``template``, carrying over customizations from ``preserve_from``."""

    properties: dict[str, object] = dict(template.rule_properties)
    properties["displayName"] = template.display_name
    properties["alertRuleTemplateName"] = template.template_name
    if template.template_version:
        properties["templateVersion"] = template.template_version
    properties["enabled"] = True

    if preserve_from is not None:
        for key in PRESERVED_RULE_FIELDS:
            value = preserve_from.get(key)
            if value:
                properties[key] = copy.deepcopy(value)

    return normalize_rule_properties(properties, rule_kind=template.rule_kind)
