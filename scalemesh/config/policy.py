"""
Similarity policy definitions and constants.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Mapping, Optional


class CloudProviderName(str, Enum):
    """
    Cloud providers that ship their own set of per-node labels.

    Using ``str`` as a mixin keeps the values usable as plain registry keys
    and YAML strings.
    """

    AWS = "aws"
    AZURE = "azure"
    GCE = "gce"


# Labels that legitimately differ between nodes of otherwise identical groups.
BASIC_IGNORED_LABELS: FrozenSet[str] = frozenset(
    {
        "kubernetes.io/hostname",
        "failure-domain.beta.kubernetes.io/zone",
        "failure-domain.beta.kubernetes.io/region",
        "topology.kubernetes.io/zone",
        "topology.kubernetes.io/region",
        "beta.kubernetes.io/fluentd-ds-ready",
        "kops.k8s.io/instancegroup",
    }
)


PROVIDER_IGNORED_LABELS: Dict[CloudProviderName, FrozenSet[str]] = {
    CloudProviderName.AWS: frozenset(
        {
            "alpha.eksctl.io/instance-id",
            "alpha.eksctl.io/nodegroup-name",
            "eks.amazonaws.com/nodegroup",
            "k8s.amazonaws.com/eniConfig",
            "lifecycle",
            "topology.ebs.csi.aws.com/zone",
        }
    ),
    CloudProviderName.AZURE: frozenset(
        {
            "agentpool",
            "kubernetes.azure.com/agentpool",
            "kubernetes.azure.com/node-image-version",
            "kubernetes.azure.com/consolidated-additional-properties",
            "topology.disk.csi.azure.com/zone",
        }
    ),
    CloudProviderName.GCE: frozenset(
        {
            "cloud.google.com/gke-nodepool",
            "topology.gke.io/zone",
        }
    ),
}


PROVIDER_ALIASES: Dict[str, str] = {
    "amazon": CloudProviderName.AWS.value,
    "eks": CloudProviderName.AWS.value,
    "ec2": CloudProviderName.AWS.value,
    "aks": CloudProviderName.AZURE.value,
    "microsoft": CloudProviderName.AZURE.value,
    "gke": CloudProviderName.GCE.value,
    "gcp": CloudProviderName.GCE.value,
    "google": CloudProviderName.GCE.value,
}


# Capacity must match exactly for cpu; memory may drift slightly because
# kernels reserve different amounts on otherwise identical machines.
DEFAULT_DIFFERENCE_RATIOS: Dict[str, float] = {
    "cpu": 0.0,
    "memory": 0.015,
}


def resolve_cloud_provider(value: str | CloudProviderName) -> Optional[CloudProviderName]:
    """Map a provider name or alias (``"eks"``, ``"gke"``, ...) to :class:`CloudProviderName`."""
    if isinstance(value, CloudProviderName):
        return value
    key = str(value).strip().lower()
    try:
        return CloudProviderName(PROVIDER_ALIASES.get(key, key))
    except ValueError:
        return None


def provider_ignored_labels(provider: str | CloudProviderName) -> FrozenSet[str]:
    """
    Per-node labels the provider stamps on otherwise identical groups.

    Raises:
        ValueError: if ``provider`` is not a known provider or alias.
    """
    resolved = resolve_cloud_provider(provider)
    if resolved is None:
        known = ", ".join(sorted([member.value for member in CloudProviderName] + list(PROVIDER_ALIASES)))
        raise ValueError(f"Unknown cloud provider '{provider}'. Known providers: {known}")
    return PROVIDER_IGNORED_LABELS[resolved]


def build_ignored_labels(
    extra: Optional[Iterable[str]] = None,
    *,
    provider: str | CloudProviderName | None = None,
) -> FrozenSet[str]:
    """
    Combine the basic ignored labels, the provider's labels and ``extra``.

    Raises:
        ValueError: if ``provider`` is given but cannot be resolved.
    """
    labels = set(BASIC_IGNORED_LABELS)
    if provider is not None:
        labels.update(provider_ignored_labels(provider))
    for label in extra or ():
        key = str(label).strip()
        if key:
            labels.add(key)
    return frozenset(labels)


def normalize_difference_ratios(ratios: Optional[Mapping[str, object]]) -> Dict[str, float]:
    """
    Validate a resource -> ratio mapping.

    ``None`` selects :data:`DEFAULT_DIFFERENCE_RATIOS`; an empty mapping
    disables resource comparison entirely.

    Raises:
        ValueError: if a ratio is not a finite, non-negative number.
    """
    if ratios is None:
        return dict(DEFAULT_DIFFERENCE_RATIOS)

    normalized: Dict[str, float] = {}
    for name, raw in ratios.items():
        key = str(name).strip()
        if not key:
            raise ValueError("Difference ratio requires a non-empty resource name")
        try:
            value = float(raw)  # type: ignore[arg-type]
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Difference ratio for '{key}' must be a number, got {raw!r}") from exc
        if math.isnan(value) or math.isinf(value) or value < 0:
            raise ValueError(f"Difference ratio for '{key}' must be finite and non-negative, got {value}")
        normalized[key] = value
    return normalized
