# Optional configuration loading (controller gains and seeds) for applications.
# The controller itself never reads configuration: pid_loop.core does not import this module.
import json
from dataclasses import dataclass, fields

from .core.control.pid import ScalarController
from .logger import get_logger

logger = get_logger(__name__)


class ConfigError(ValueError):
    """Raised when a gains file cannot be turned into Gains."""


@dataclass(frozen=True)
class Gains:
    """Gains and seed values for a scalar controller."""
    kp: float = 0.0
    ki: float = 0.0
    kd: float = 0.0
    initial_output: float = 0.0
    initial_error: float = 0.0
    initial_accumulated_error: float = 0.0


def load_gains(file_path="gains.json"):
    """Load Gains from a JSON object. Omitted keys keep their default of 0.0."""
    try:
        with open(file_path, "r") as f:
            raw = json.load(f)
    except (IOError, json.JSONDecodeError) as e:
        logger.error("GainsLoadFailed", {"file": str(file_path), "error": str(e)})
        raise ConfigError(f"Error loading gains from {file_path}: {e}") from e

    if not isinstance(raw, dict):
        logger.error("GainsLoadFailed", {"file": str(file_path), "error": "not a JSON object"})
        raise ConfigError(f"Gains file {file_path} must contain a JSON object")

    known = {f.name for f in fields(Gains)}
    unknown = sorted(set(raw) - known)
    if unknown:
        logger.warning("GainsUnknownKeys", {"file": str(file_path), "keys": unknown})

    values = {}
    for name in known & set(raw):
        value = raw[name]
        # bool is an int subclass but never a meaningful gain
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            logger.error("GainsLoadFailed", {"file": str(file_path), "key": name, "value": value})
            raise ConfigError(f"Gain '{name}' in {file_path} must be a number, got {value!r}")
        values[name] = float(value)

    gains = Gains(**values)
    logger.info("GainsLoaded", {"file": str(file_path), "kp": gains.kp, "ki": gains.ki, "kd": gains.kd})
    return gains


def build_controller(gains):
    """Build a float controller from Gains."""
    return ScalarController(
        gains.kp,
        gains.ki,
        gains.kd,
        gains.initial_output,
        gains.initial_error,
        gains.initial_accumulated_error,
    )
