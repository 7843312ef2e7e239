import os
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field

ENV_PREFIX = "ROBOTLANG_"


class SimulationConfig(BaseModel):
    """Constants of the simulated arena and robot."""
    model_config = ConfigDict(frozen=True)

    env_size: float = Field(default=50.0, gt=0.0, description="Side of the square arena")
    robot_radius: float = Field(default=1.0, gt=0.0, description="Radius of the robot disk")
    margin: float = Field(default=0.01, ge=0.0, description="Safety margin kept from the arena walls")
    speed: float = Field(default=0.001, gt=0.0, description="Distance covered by one movement step")
    sensor_range: float = Field(default=1.1, gt=0.0, description="Distance of the rFeel sensor point")

    @classmethod
    def from_env(cls, **overrides: Any) -> "SimulationConfig":
        """Build a config from ROBOTLANG_* environment variables, then explicit overrides."""
        data: Dict[str, Any] = {}
        for name in cls.model_fields:
            raw = os.getenv(ENV_PREFIX + name.upper())
            if raw is not None:
                data[name] = raw
        data.update(overrides)
        return cls.model_validate(data)
