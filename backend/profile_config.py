"""
Profile System — loads profile.yaml and provides validated configuration.

The profile is the single source of truth for all user-configurable settings:
system name, CORS origins, inference backends, gateway pacing, conversation
memory depth, and vision pipeline parameters. Static routing tables and
vocabularies live in config.py as code constants.

Usage:
    from profile_config import load_profile
    profile = load_profile()
    print(profile.system.name)
"""

import dataclasses
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

# ── Profile Path Resolution ──
_PROFILE_PATH_ENV = "REMODEL_PROFILE_PATH"
_PROJECT_ROOT = Path(__file__).parent.parent
_DEFAULT_PROFILE_PATH = _PROJECT_ROOT / "profile.yaml"


# ── Dataclasses ──

@dataclass
class SystemConfig:
    name: str = "Remodel Studio"
    description: str = "Multi-agent home remodeling assistant"


@dataclass
class WebConfig:
    cors_origins: list[str] = field(default_factory=lambda: [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ])


@dataclass
class InferenceBackendConfig:
    name: str = "openrouter"
    type: str = "openai"  # openai | ollama
    endpoint: str = "https://openrouter.ai/api"
    enabled: bool = True
    api_key_env: str = "OPENROUTER_API_KEY"
    api_key: str = ""  # resolved from api_key_env at load time, never from YAML
    timeout: float = 60.0
    headers: dict[str, str] = field(default_factory=dict)


def _default_backends() -> list[InferenceBackendConfig]:
    return [
        InferenceBackendConfig(
            headers={"X-Title": "Remodel Studio"},
        ),
        InferenceBackendConfig(
            name="ollama",
            type="ollama",
            endpoint="http://localhost:11434",
            enabled=False,
            api_key_env="",
        ),
    ]


@dataclass
class InferenceConfig:
    backends: list[InferenceBackendConfig] = field(default_factory=_default_backends)


@dataclass
class GatewayConfig:
    min_interval_seconds: float = 2.0
    retries_per_route: int = 1


@dataclass
class MemoryConfig:
    max_turns: int = 10


@dataclass
class VisionConfig:
    max_dimension: int = 1024
    edge_threshold: float = 50.0
    scan_stride: int = 10
    min_run_length: int = 50
    min_wall_length: int = 100
    door_aspect_ratio: float = 1.5


@dataclass
class Profile:
    system: SystemConfig = field(default_factory=SystemConfig)
    web: WebConfig = field(default_factory=WebConfig)
    inference: InferenceConfig = field(default_factory=InferenceConfig)
    gateway: GatewayConfig = field(default_factory=GatewayConfig)
    memory: MemoryConfig = field(default_factory=MemoryConfig)
    vision: VisionConfig = field(default_factory=VisionConfig)

    def get_backend(self, name: str) -> Optional[InferenceBackendConfig]:
        """Get an inference backend config by name."""
        for b in self.inference.backends:
            if b.name == name:
                return b
        return None

    def enabled_backends(self) -> list[InferenceBackendConfig]:
        return [b for b in self.inference.backends if b.enabled]


# ── Parsing ──

def _parse_dict(data: dict, cls, **overrides):
    """Create a dataclass instance from a dict, ignoring unknown keys."""
    field_names = {f.name for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in data.items() if k in field_names}
    filtered.update(overrides)
    return cls(**filtered)


def _parse_backend(raw: dict) -> InferenceBackendConfig:
    # api_key never comes from YAML
    data = {k: v for k, v in raw.items() if k != "api_key"}
    backend = _parse_dict(data, InferenceBackendConfig)
    if backend.api_key_env:
        backend.api_key = os.environ.get(backend.api_key_env, "")
    if not isinstance(backend.headers, dict):
        backend.headers = {}
    return backend


def invalid_vision_fields(vision: VisionConfig) -> list[str]:
    """Names of VisionConfig fields that are not positive numbers of the right type."""
    defaults = VisionConfig()
    invalid = []
    for f in dataclasses.fields(VisionConfig):
        value = getattr(vision, f.name)
        expected = int if isinstance(getattr(defaults, f.name), int) else (int, float)
        if isinstance(value, bool) or not isinstance(value, expected) or value <= 0:
            invalid.append(f.name)
    return invalid


def _parse_vision(raw: dict) -> VisionConfig:
    vision = _parse_dict(raw, VisionConfig)
    defaults = VisionConfig()
    for name in invalid_vision_fields(vision):
        logger.warning("vision.%s=%r is invalid — using %r",
                       name, getattr(vision, name), getattr(defaults, name))
        setattr(vision, name, getattr(defaults, name))
    return vision


def load_profile_from_dict(raw: dict) -> Profile:
    """Parse a raw YAML dict into a Profile dataclass."""
    profile = Profile()

    if isinstance(raw.get("system"), dict):
        profile.system = _parse_dict(raw["system"], SystemConfig)

    if isinstance(raw.get("web"), dict):
        profile.web = _parse_dict(raw["web"], WebConfig)

    # Inference
    if isinstance(raw.get("inference"), dict):
        backends = []
        for b in raw["inference"].get("backends", []) or []:
            if isinstance(b, dict):
                backends.append(_parse_backend(b))
        if backends:
            profile.inference = InferenceConfig(backends=backends)
    else:
        for backend in profile.inference.backends:
            if backend.api_key_env:
                backend.api_key = os.environ.get(backend.api_key_env, "")

    if isinstance(raw.get("gateway"), dict):
        profile.gateway = _parse_dict(raw["gateway"], GatewayConfig)

    if isinstance(raw.get("memory"), dict):
        profile.memory = _parse_dict(raw["memory"], MemoryConfig)

    if isinstance(raw.get("vision"), dict):
        profile.vision = _parse_vision(raw["vision"])

    return profile


def load_profile(path: Optional[Path] = None) -> Profile:
    """Load profile from YAML file. Falls back to defaults if missing."""
    if path is None:
        env_path = os.environ.get(_PROFILE_PATH_ENV)
        path = Path(env_path) if env_path else _DEFAULT_PROFILE_PATH
    profile_path = Path(path)

    if not profile_path.exists():
        logger.info("No profile.yaml found at %s — using defaults", profile_path)
        return load_profile_from_dict({})

    try:
        raw = yaml.safe_load(profile_path.read_text()) or {}
        if not isinstance(raw, dict):
            logger.warning("profile.yaml is not a valid YAML mapping — using defaults")
            return load_profile_from_dict({})
        profile = load_profile_from_dict(raw)
        logger.info("Profile loaded: system=%s, backends=%s",
                    profile.system.name,
                    [b.name for b in profile.enabled_backends()])
        return profile
    except (OSError, yaml.YAMLError, TypeError) as e:
        logger.error("Failed to load profile.yaml: %s — using defaults", e)
        return load_profile_from_dict({})


# ── Cached profile for the HTTP entry point ──

_profile: Optional[Profile] = None


def get_profile() -> Profile:
    """Return the cached profile. Loads on first call."""
    global _profile
    if _profile is None:
        _profile = load_profile()
    return _profile


def reload_profile() -> Profile:
    """Force reload of the profile from disk."""
    global _profile
    _profile = load_profile()
    return _profile
