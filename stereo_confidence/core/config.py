"""
Configuration for disparity confidence estimation

Uses dataclasses for type safety and validation.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Any, Union
from pathlib import Path
import json


# Q4.4 fixed point: raw value / 16 = disparity in pixels
DISPARITY_SCALE = 16

# Raw disparity at or below this value marks an unmatched pixel (-1.0 px)
INVALID_DISPARITY = -16

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class ConfidenceConfig:
    """Tunable constants for confidence fusion"""

    # Sobel magnitude (|gx| + |gy|) at which texture counts as fully reliable
    texture_cap: float = 200.0

    # Local disparity variance (Q4.4 squared units) at which the noise score is 0.5
    variance_half_life: float = 400.0

    # Invalid-disparity sentinel of the upstream matcher
    invalid_disparity: int = INVALID_DISPARITY

    # Number of horizontal bands fused in parallel (1 = single pass)
    num_workers: int = 1

    # Threshold used when masking low-confidence disparities
    min_confidence: int = 0

    # Logging level: "DEBUG", "INFO", "WARNING", "ERROR"
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate configuration"""
        if self.texture_cap <= 0:
            raise ValueError(f"texture_cap must be positive, got {self.texture_cap}")

        if self.variance_half_life <= 0:
            raise ValueError(f"variance_half_life must be positive, got {self.variance_half_life}")

        if not (-32768 <= self.invalid_disparity <= 32767):
            raise ValueError(f"invalid_disparity must fit in int16, got {self.invalid_disparity}")

        if self.num_workers < 1:
            raise ValueError(f"num_workers must be >= 1, got {self.num_workers}")

        if not (0 <= self.min_confidence <= 255):
            raise ValueError(f"min_confidence must be in [0, 255], got {self.min_confidence}")

        self.log_level = self.log_level.upper()
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(f"Invalid log_level: {self.log_level}")

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "ConfidenceConfig":
        """Create config from dictionary (for CLI/JSON loading)"""
        return cls(**config_dict)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "ConfidenceConfig":
        """Load config from a JSON file"""
        path = Path(path)
        if not path.is_file():
            raise ValueError(f"Config file does not exist: {path}")

        with open(path, "r") as f:
            config_dict = json.load(f)

        if not isinstance(config_dict, dict):
            raise ValueError(f"Config file {path} must contain a JSON object")
        return cls.from_dict(config_dict)

    def to_dict(self) -> Dict[str, Any]:
        """Export config to dictionary"""
        return asdict(self)
