# config_manager.py
import json
import logging
from dataclasses import dataclass, asdict, fields, replace
from pathlib import Path

from . import error as E

logger = logging.getLogger(__name__)

config_json = Path(__file__).resolve().parent.parent / "config.json"

# Never evaluate with fewer significant digits than this
PRECISION_FLOOR = 28

ANGLE_UNITS = ("deg", "rad", "grad")
MODES = ("standard", "scientific")

DEFAULT_SETTINGS = {
    "angle_unit": "deg",
    "precision": PRECISION_FLOOR,
    "mode": "standard",
    "max_history": 100,
    "display_digits": 12,
    "log_level": "WARNING",
}


def load_setting_value(key_value):
    try:
        with open(config_json, 'r', encoding= 'utf-8') as f:
            settings_dict = json.load(f)

    except (FileNotFoundError, json.JSONDecodeError) as e:
        logger.warning("Could not read %s: %s", config_json, e)
        settings_dict = {}


    if key_value == "all":
        return settings_dict

    else:
        return settings_dict.get(key_value, DEFAULT_SETTINGS.get(key_value))


def save_setting(settings_dict):
    try:
        with open (config_json, 'w', encoding= 'utf-8') as f:
            json.dump(settings_dict, f, indent=4)
            return settings_dict

    except OSError as e:
        logger.warning("Could not write %s: %s", config_json, e)
        return{}


@dataclass(frozen=True)
class Preferences:
    """User preferences that the engine reads.

    Only ``angle_unit`` and ``precision`` influence evaluation; the rest are
    carried for the collaborators (display, history).
    """
    angle_unit: str = "deg"
    precision: int = PRECISION_FLOOR
    mode: str = "standard"
    max_history: int = 100
    display_digits: int = 12

    def __post_init__(self):
        if self.angle_unit not in ANGLE_UNITS:
            raise E.ConfigError(f"Invalid angle unit: {self.angle_unit!r}", code="5001")
        if isinstance(self.precision, bool) or not isinstance(self.precision, int):
            raise E.ConfigError(f"Invalid precision: {self.precision!r}", code="5002")
        if self.precision < PRECISION_FLOOR:
            logger.warning("Precision %d is below the floor, using %d", self.precision, PRECISION_FLOOR)
            object.__setattr__(self, "precision", PRECISION_FLOOR)
        if self.mode not in MODES:
            raise E.ConfigError(f"Invalid setting: mode={self.mode!r}", code="5003")
        if not isinstance(self.max_history, int) or self.max_history < 1:
            raise E.ConfigError(f"Invalid setting: max_history={self.max_history!r}", code="5003")
        if not isinstance(self.display_digits, int) or self.display_digits < 1:
            raise E.ConfigError(f"Invalid setting: display_digits={self.display_digits!r}", code="5003")

    @classmethod
    def from_dict(cls, settings_dict):
        """Build preferences from a (partial) settings mapping; unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in settings_dict.items() if key in known}
        return cls(**values)

    def updated(self, **changes):
        return replace(self, **changes)

    def to_dict(self):
        return asdict(self)


def load_preferences():
    """Read preferences from config.json, writing back a clamped precision."""
    all_settings = load_setting_value("all")
    prefs = Preferences.from_dict(all_settings)

    stored_precision = all_settings.get("precision")
    if isinstance(stored_precision, int) and stored_precision != prefs.precision:
        all_settings["precision"] = prefs.precision
        save_setting(all_settings)

    return prefs


def save_preferences(prefs):
    all_settings = load_setting_value("all")
    all_settings.update(prefs.to_dict())
    return save_setting(all_settings)
