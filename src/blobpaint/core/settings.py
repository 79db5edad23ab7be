"""Save and load settings."""

from dataclasses import asdict, dataclass, fields

import yaml

DEFAULT_SETTINGS_FILE = "blobpaint.yaml"

COLOR_FIELDS = ("border_color", "root_color", "node_color")
SIZE_FIELDS = ("min_blob_size", "max_blob_size", "isle_blob_size", "amount_of_clusters", "max_iterations")


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def _check_color(name, value):
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"{name} must be a list of 3 or 4 channels, got {value!r}")
    color = tuple(value)
    if len(color) == 3:
        color += (255,)
    if len(color) != 4 or not all(_is_int(c) and 0 <= c <= 255 for c in color):
        raise ValueError(f"{name} must be 3 or 4 channels in 0-255, got {value!r}")
    return color


@dataclass
class Settings:
    """Tunable parameters shared by the operations."""

    border_color: tuple = (1, 1, 1, 255)
    border_opacity: float = None
    min_blob_size: int = 10
    max_blob_size: int = 200
    isle_blob_size: int = 10
    amount_of_clusters: int = 3
    max_iterations: int = 100
    root_color: tuple = (96, 96, 96, 255)
    node_color: tuple = (245, 245, 245, 255)
    seed: int = None

    def __post_init__(self):
        for name in COLOR_FIELDS:
            setattr(self, name, _check_color(name, getattr(self, name)))
        opacity = self.border_opacity
        if opacity is not None:
            if not isinstance(opacity, (int, float)) or isinstance(opacity, bool):
                raise ValueError(f"border_opacity must be a number, got {opacity!r}")
            if not 0 < opacity <= 1:
                raise ValueError(f"border_opacity must be in (0, 1], got {opacity}")
        for name in SIZE_FIELDS:
            value = getattr(self, name)
            if not _is_int(value) or value < 0:
                raise ValueError(f"{name} must be a non-negative integer, got {value!r}")
        if self.amount_of_clusters < 1:
            raise ValueError(f"amount_of_clusters must be at least 1, got {self.amount_of_clusters}")
        if self.seed is not None and not _is_int(self.seed):
            raise ValueError(f"seed must be an integer, got {self.seed!r}")


def save_settings(settings, filename=DEFAULT_SETTINGS_FILE):
    """Save settings to YAML."""
    data = asdict(settings)
    for name in COLOR_FIELDS:
        data[name] = list(getattr(settings, name))
    with open(filename, "w") as f:
        yaml.dump(data, f)


def load_settings(filename=DEFAULT_SETTINGS_FILE):
    """Load settings from YAML, falling back to defaults for missing keys."""
    with open(filename, "r") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {filename}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {filename} must contain a mapping")
    known = {field.name for field in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown settings: {', '.join(unknown)}")
    return Settings(**data)
