from dataclasses import dataclass, field
from typing import List, Tuple

Position = Tuple[int, int]


@dataclass(slots=True)
class Selection:
    """In-progress chain. Empty chain means the selection machine is idle."""
    chain: List[Position] = field(default_factory=list)

    @property
    def active(self) -> bool:
        return bool(self.chain)

    def clear(self) -> None:
        self.chain.clear()
