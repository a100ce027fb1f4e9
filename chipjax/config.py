"""Emulator run configuration."""

from typing import Any, Dict

from chex import dataclass


@dataclass(frozen=True)
class EmulatorConfig:
    """Pacing, quirk and presentation settings for a run.

    Attributes:
        cycles_per_second: CPU speed in Hz (typically 500-700)
        timer_hz: Delay/sound timer rate, also the frame rate of the scheduler
        new_functionality: CHIP-48 semantics for 8XY6/8XYE, BXNN and FX55/FX65
        seed: PRNG seed for CXNN
        scale: Window pixels per CHIP-8 pixel
        color_scheme: Name understood by `create_color_scheme`
        log_level: Level of the package logger
    """
    cycles_per_second: int = 600
    timer_hz: int = 60
    new_functionality: bool = False
    seed: int = 0
    scale: int = 10
    color_scheme: str = "white"
    log_level: str = "INFO"

    def __post_init__(self):
        if self.cycles_per_second <= 0 or self.timer_hz <= 0:
            raise ValueError(
                f"cycles_per_second and timer_hz must be positive, got "
                f"{self.cycles_per_second} and {self.timer_hz}"
            )

    @property
    def cycles_per_frame(self) -> int:
        """Number of CPU cycles to run per timer tick."""
        return max(1, self.cycles_per_second // self.timer_hz)

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "EmulatorConfig":
        """Build from a plain mapping, ignoring keys that are not config fields."""
        known = {name: values[name] for name in cls.__dataclass_fields__ if name in values}
        return cls(**known)
