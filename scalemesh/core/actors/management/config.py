"""
Shared configuration dataclasses for management actors.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ActorConfig:
    """
    Configuration for the node group set actor.

    ``difference_ratios`` of ``None`` keeps the built-in ratios; ``use_file_config``
    builds the processor from the YAML configuration instead of these fields.
    """

    name: str
    comparator: str = "default"
    ignored_labels: list[str] = field(default_factory=list)
    difference_ratios: dict[str, float] | None = None
    balancing_enabled: bool = True
    use_file_config: bool = False
