"""Read-only lookups over target templates and plans."""
from __future__ import annotations

import uuid
from typing import Iterable

from django.core.exceptions import ValidationError

from targets.exceptions import TemplateNotFound
from targets.models import Plan, TargetTemplate

UNKNOWN_PLAN_LABEL = "Unknown Plan"


class PlanCatalog:
    """Map plan identifiers to display names."""

    def get_plan_names(self, plan_ids: Iterable) -> dict[str, str]:
        """Return ``{plan_id: name}`` for every id in *plan_ids*.

        Ids without a matching Plan (including malformed ones) map to
        ``UNKNOWN_PLAN_LABEL`` instead of failing.
        """
        requested = [str(plan_id) for plan_id in plan_ids]
        valid = []
        for plan_id in requested:
            try:
                valid.append(uuid.UUID(plan_id))
            except ValueError:
                continue

        names = {
            str(pk): name
            for pk, name in Plan.objects.filter(pk__in=valid).values_list("pk", "name")
        }
        return {plan_id: names.get(plan_id, UNKNOWN_PLAN_LABEL) for plan_id in requested}


class TargetCatalog:
    """Look up target templates and their plan quotas."""

    def __init__(self, plan_catalog: PlanCatalog | None = None) -> None:
        self.plan_catalog = plan_catalog or PlanCatalog()

    def get_template(self, template_id) -> TargetTemplate:
        try:
            return TargetTemplate.objects.get(pk=template_id)
        except (TargetTemplate.DoesNotExist, ValidationError, ValueError):
            raise TemplateNotFound(template_id) from None

    def get_quotas(self, template_id) -> dict[str, int]:
        return self.get_template(template_id).quotas

    def plan_counts(self, template: TargetTemplate) -> dict[str, dict]:
        """Per-plan display data keyed by plan name.

        ``{"Monthly Plan": {"plan_id": "...", "target_count": 3}, ...}``
        """
        quotas = template.quotas
        names = self.plan_catalog.get_plan_names(quotas.keys())
        return {
            names[plan_id]: {"plan_id": plan_id, "target_count": count}
            for plan_id, count in quotas.items()
        }
