# chatagent/config.py
"""
配置加载 - .chatagent/config.yaml

The file is created with defaults on first use. Values given explicitly on
the command line override the file.
"""

import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import jinja2
import yaml

from .errors import ConfigError
from .llm.builder import SERVICES
from .utils.console import LOG_LEVELS, info

CONFIG_DIR = Path(".chatagent")
CONFIG_FILE = CONFIG_DIR / "config.yaml"
CONFIG_TEMPLATE = Path(__file__).parent / "templates" / "config.yaml.j2"

API_KEY_ENV = {
    "openai": "OPENAI_API_KEY",
    "groq": "GROQ_API_KEY",
    "gemini": "GEMINI_API_KEY",
}

MODEL_KEYS = ("analysis_model", "instructions_model", "generate_code_model")

DEFAULT_MODELS = {
    "openai": dict.fromkeys(MODEL_KEYS, "gpt-4o"),
    "groq": dict.fromkeys(MODEL_KEYS, "meta-llama/llama-4-maverick-17b-128e-instruct"),
    "gemini": dict.fromkeys(MODEL_KEYS, "gemini-2.5-flash"),
}

DEFAULTS: Dict[str, Any] = {
    "service": "openai",
    "max_history_length": 100,
    "max_process_loops": 25,
    "rate_limit_rpm": 0,
    "code_theme": "monokai",
    "log_level": "info",
    "strict_protocol": False,
    "auto_commit": False,
}


@dataclass
class Config:
    directory: str
    service: str = DEFAULTS["service"]
    analysis_model: str = DEFAULT_MODELS["openai"]["analysis_model"]
    instructions_model: str = DEFAULT_MODELS["openai"]["instructions_model"]
    generate_code_model: str = DEFAULT_MODELS["openai"]["generate_code_model"]
    max_history_length: int = DEFAULTS["max_history_length"]
    max_process_loops: int = DEFAULTS["max_process_loops"]
    rate_limit_rpm: int = DEFAULTS["rate_limit_rpm"]
    code_theme: str = DEFAULTS["code_theme"]
    log_level: str = DEFAULTS["log_level"]
    strict_protocol: bool = DEFAULTS["strict_protocol"]
    auto_commit: bool = DEFAULTS["auto_commit"]
    api_keys: Dict[str, str] = field(default_factory=dict, repr=False)

    @property
    def api_key(self) -> str:
        """Key for the selected service; raises ConfigError when none is set."""
        key = self.api_keys.get(self.service)
        if not key:
            raise ConfigError(
                f"no API key for service '{self.service}': pass it on the command line "
                f"or set {API_KEY_ENV[self.service]}"
            )
        return key

    def to_display_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["api_keys"] = {name: _mask(key) for name, key in self.api_keys.items() if key}
        return data


def _mask(key: str) -> str:
    if len(key) <= 8:
        return "****"
    return f"{key[:4]}...{key[-4:]}"


def render_default_config(service: str = DEFAULTS["service"]) -> str:
    """渲染默认配置文件内容"""
    env = jinja2.Environment(loader=jinja2.DictLoader({"t": CONFIG_TEMPLATE.read_text(encoding="utf-8")}),
                             trim_blocks=True, lstrip_blocks=True)
    values = dict(DEFAULTS, service=service)
    return env.get_template("t").render(services=DEFAULT_MODELS, **values)


def validate_config_content(content: str) -> Dict[str, Any]:
    """Parse a config document; raises ConfigError when it is not a YAML mapping."""
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"YAML syntax error in config: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("config content must be a YAML mapping")
    services = data.get("services", {})
    if services is not None and not isinstance(services, dict):
        raise ConfigError("'services' must be a mapping of service name to models")
    return data


def _int_value(data: Mapping[str, Any], key: str) -> int:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(f"'{key}' must be a non-negative integer, got {value!r}")
    return value


def _bool_value(data: Mapping[str, Any], key: str) -> bool:
    value = data[key]
    if not isinstance(value, bool):
        raise ConfigError(f"'{key}' must be true or false, got {value!r}")
    return value


def ensure_config_file(path: Path = CONFIG_FILE) -> Path:
    if not path.exists():
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(render_default_config(), encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"failed to create config file {path}: {e}") from e
        info(f"Created default configuration: {path}")
    return path


def load_config(
    directory: str,
    overrides: Optional[Mapping[str, Any]] = None,
    api_keys: Optional[Mapping[str, Optional[str]]] = None,
    path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Config:
    """
    Build the effective configuration.

    Precedence: overrides (None values ignored) > config file > defaults.
    API keys come from api_keys first, then the environment.
    """
    path = ensure_config_file(path or CONFIG_FILE)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"failed to read config file {path}: {e}") from e
    file_data = validate_config_content(content)

    merged: Dict[str, Any] = dict(DEFAULTS)
    merged.update({k: v for k, v in file_data.items() if k in DEFAULTS and v is not None})
    merged.update({k: v for k, v in (overrides or {}).items() if v is not None})

    service = merged["service"]
    if service not in SERVICES:
        raise ConfigError(f"invalid programming service type: {service}, allowed: {', '.join(SERVICES)}")
    if merged["log_level"] not in LOG_LEVELS:
        raise ConfigError(f"invalid log level: {merged['log_level']}, allowed: {', '.join(LOG_LEVELS)}")

    models = dict(DEFAULT_MODELS[service])
    service_models = (file_data.get("services") or {}).get(service) or {}
    if not isinstance(service_models, dict):
        raise ConfigError(f"'services.{service}' must be a mapping")
    models.update({k: v for k, v in service_models.items() if k in MODEL_KEYS and v})

    environ = os.environ if environ is None else environ
    keys = {name: environ.get(var, "") for name, var in API_KEY_ENV.items()}
    keys.update({name: key for name, key in (api_keys or {}).items() if key})

    return Config(
        directory=str(Path(directory).resolve()),
        service=service,
        max_history_length=_int_value(merged, "max_history_length"),
        max_process_loops=_int_value(merged, "max_process_loops"),
        rate_limit_rpm=_int_value(merged, "rate_limit_rpm"),
        code_theme=str(merged["code_theme"]),
        log_level=merged["log_level"],
        strict_protocol=_bool_value(merged, "strict_protocol"),
        auto_commit=_bool_value(merged, "auto_commit"),
        api_keys=keys,
        **models,
    )
