# ========================= config.py =========================
import json
from dataclasses import asdict, dataclass, field, fields
from typing import Optional

from notes.model import PITCH_CLASSES

COLOR_SPACES = ("hsl", "okhsl")
MAX_OVERTONES = 6


class ConfigError(ValueError):
    pass


@dataclass
class CircleConfig:
    tonic: str = "C"
    degree_offset: float = 60.0   # hue rotation, degrees


@dataclass
class ColorConfig:
    light_floor: float = 5.0
    light_ceiling: float = 95.0
    saturation_floor: float = 80.0
    saturation_ceiling: float = 100.0
    space: str = "okhsl"                    # "hsl" or "okhsl"
    saturation_from_velocity: bool = False  # simple mode: light over 88 keys, saturation from velocity


@dataclass
class MixBias:
    root_bias: float = 1.5
    melody_bias: float = 1.5
    consider_velocity: bool = True
    velocity_on_middle: bool = True


@dataclass
class RenderBias:
    root_bias: float = 1.0
    middle_bias: float = 1.0
    melody_bias: float = 1.0
    emergent_bias: float = 1.0


@dataclass
class OvertoneConfig:
    number_overtones: int = 6
    backoff_coefficient: float = 1.5


@dataclass
class DecayConfig:
    decay_per_second: float = 0.0   # 0.05 -> -5% velocity per second held


@dataclass
class DisplayConfig:
    tick_ms: int = 33
    wait_before_clear_ms: int = 100
    pool_size: int = 10000


@dataclass
class RenderConfig:
    window_w: int = 960
    window_h: int = 640
    status_h: int = 28


@dataclass
class InputConfig:
    midi_port: Optional[str] = None   # None -> first available port
    use_midi_port: bool = True
    keymap_path: Optional[str] = None
    loop_midi: bool = False           # restart the file when it ends


@dataclass
class AppConfig:
    circle: CircleConfig = field(default_factory=CircleConfig)
    color: ColorConfig = field(default_factory=ColorConfig)
    mix: MixBias = field(default_factory=MixBias)
    render_bias: RenderBias = field(default_factory=RenderBias)
    overtone: OvertoneConfig = field(default_factory=OvertoneConfig)
    decay: DecayConfig = field(default_factory=DecayConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    input: InputConfig = field(default_factory=InputConfig)

    @classmethod
    def from_dict(cls, obj: dict) -> "AppConfig":
        """Build a config from nested dicts; missing keys keep defaults."""
        kwargs = {}
        for f in fields(cls):
            section = obj.get(f.name)
            if section is None:
                continue
            if not isinstance(section, dict):
                raise ConfigError(f"Section '{f.name}' must be an object")
            section_cls = type(f.default_factory())
            known = {sf.name for sf in fields(section_cls)}
            unknown = set(section) - known
            if unknown:
                raise ConfigError(f"Unknown keys in '{f.name}': {sorted(unknown)}")
            kwargs[f.name] = section_cls(**section)
        cfg = cls(**kwargs)
        cfg.validate()
        return cfg

    def to_dict(self) -> dict:
        return asdict(self)

    def validate(self):
        if self.circle.tonic not in PITCH_CLASSES:
            raise ConfigError(f"Unknown tonic: {self.circle.tonic}")
        if self.color.space not in COLOR_SPACES:
            raise ConfigError(f"Unknown color space: {self.color.space}")
        for name in ("light_floor", "light_ceiling", "saturation_floor", "saturation_ceiling"):
            v = getattr(self.color, name)
            if not 0 <= v <= 100:
                raise ConfigError(f"color.{name} must be within [0, 100], got {v}")
        if not 0 <= self.overtone.number_overtones <= MAX_OVERTONES:
            raise ConfigError(f"overtone.number_overtones must be within [0, {MAX_OVERTONES}]")
        if self.overtone.backoff_coefficient <= 0:
            raise ConfigError("overtone.backoff_coefficient must be positive")
        for section in (self.mix, self.render_bias):
            for f in fields(section):
                v = getattr(section, f.name)
                if f.name.endswith("_bias") and v < 0:
                    raise ConfigError(f"{f.name} must not be negative")
        if self.decay.decay_per_second < 0:
            raise ConfigError("decay.decay_per_second must not be negative")
        if self.display.tick_ms <= 0 or self.display.pool_size <= 0:
            raise ConfigError("display.tick_ms and display.pool_size must be positive")
        if self.render.window_w <= 0 or self.render.window_h <= self.render.status_h:
            raise ConfigError("window must be larger than the status bar")


def load_config(path: str) -> AppConfig:
    with open(path, "r", encoding="utf-8") as f:
        obj = json.load(f)
    if not isinstance(obj, dict):
        raise ConfigError("Config root must be an object")
    return AppConfig.from_dict(obj)


def save_config(cfg: AppConfig, path: str):
    with open(path, "w", encoding="utf-8") as f:
        json.dump(cfg.to_dict(), f, ensure_ascii=False, indent=2)
