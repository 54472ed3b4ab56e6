from dataclasses import dataclass, field
from typing import Dict


@dataclass
class Targets:
    """Remaining removal counts per base color for the current level."""
    remaining: Dict[str, int] = field(default_factory=dict)

    def is_complete(self) -> bool:
        return all(count <= 0 for count in self.remaining.values())

    def decrement(self, color: str, amount: int) -> int:
        """Lower one target (floored at zero) and return how much it actually moved."""
        current = self.remaining.get(color)
        if current is None or amount <= 0:
            return 0
        updated = max(0, current - amount)
        self.remaining[color] = updated
        return current - updated
