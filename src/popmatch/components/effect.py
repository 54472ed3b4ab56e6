from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(slots=True)
class TransientEffect:
    """Self-expiring presentation token (explosion callout, board shake)."""
    kind: str
    remaining: float
    position: Optional[Tuple[int, int]] = None
    text: Optional[str] = None
    color: Optional[str] = None
