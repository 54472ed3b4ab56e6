from dataclasses import dataclass


@dataclass
class ComboMeter:
    """Streak counter plus the fill meter that triggers a breakout at 100."""
    meter: int = 0
    streak: int = 0

    def reset(self) -> None:
        self.meter = 0
        self.streak = 0
