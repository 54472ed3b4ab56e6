from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class LevelConfig:
    """Move budget and color targets for one level.

    ``targets`` is stored read-only; callers copy it before mutating.
    """
    move_budget: int
    targets: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.move_budget <= 0:
            raise ValueError(f"move_budget must be positive, got {self.move_budget}")
        for color, count in self.targets.items():
            if count < 0:
                raise ValueError(f"target for {color!r} must be non-negative, got {count}")
        object.__setattr__(self, "targets", MappingProxyType(dict(self.targets)))

    def total_targets(self) -> int:
        return sum(self.targets.values())
