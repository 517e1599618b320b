"""Configuration management for hfchat."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Dict, Any
import yaml

_log = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:11434/v1"
DEFAULT_MODEL = "llama3.2"

# Environment variables that take precedence over the config file
ENV_OVERRIDES = {
    "HF_BASE_URL": "base_url",
    "HUGGINGFACE_TOKEN": "token",
    "HF_MODEL": "model",
    "SYSTEM_PROMPT": "system_prompt",
}


@dataclass
class ChatConfig:
    """Resolved settings for a chat session."""
    base_url: str = DEFAULT_BASE_URL
    token: str = ""
    model: str = DEFAULT_MODEL
    max_tokens: Optional[int] = 500
    temperature: Optional[float] = 0.7
    system_prompt: Optional[str] = None
    max_context_messages: int = 20
    code_theme: str = "monokai"
    show_thinking: bool = False

    @property
    def is_local(self) -> bool:
        return "localhost" in self.base_url or "127.0.0.1" in self.base_url


class ConfigManager:
    """Manage hfchat configuration from YAML and the environment."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = Path(config_path or "~/.config/hfchat/config.yaml").expanduser()
        self.data = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            self._create_default_config()
        return self._read_yaml()

    def _read_yaml(self) -> Dict[str, Any]:
        """Read and parse YAML file."""
        try:
            with open(self.config_path, "r") as f:
                content = yaml.safe_load(f)
                return content if isinstance(content, dict) else {}
        except (OSError, yaml.YAMLError) as e:
            _log.warning("Error reading config %s: %s", self.config_path, e)
            return {}

    def _create_default_config(self) -> None:
        """Create default configuration file."""
        default_config = {
            "chat": {
                "base_url": DEFAULT_BASE_URL,
                "token": "${HUGGINGFACE_TOKEN}",
                "model": DEFAULT_MODEL,
                "max_tokens": 500,
                "temperature": 0.7,
                "max_context_messages": 20,
            },
            "display": {
                "code_theme": "monokai",
                "show_thinking": False,
            },
        }
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w") as f:
                yaml.dump(default_config, f, default_flow_style=False)
        except OSError as e:
            _log.warning("Cannot write default config %s: %s", self.config_path, e)

    def _resolve_env_var(self, value: Any) -> Any:
        """Resolve environment variable references like ${VAR_NAME}."""
        if not isinstance(value, str) or not value.startswith("${") or not value.endswith("}"):
            return value

        var_name = value[2:-1]
        return os.getenv(var_name, "")

    def get_chat_config(self) -> ChatConfig:
        """Build the chat config: file values, then environment overrides."""
        chat = {k: self._resolve_env_var(v) for k, v in (self.data.get("chat") or {}).items()}
        display = self.data.get("display") or {}

        for env_name, key in ENV_OVERRIDES.items():
            env_value = os.getenv(env_name)
            if env_value:
                chat[key] = env_value

        config = ChatConfig(
            base_url=chat.get("base_url") or DEFAULT_BASE_URL,
            token=chat.get("token") or "",
            model=chat.get("model") or DEFAULT_MODEL,
            max_tokens=chat.get("max_tokens", 500),
            temperature=chat.get("temperature", 0.7),
            system_prompt=chat.get("system_prompt") or None,
            max_context_messages=int(chat.get("max_context_messages", 20)),
            code_theme=display.get("code_theme", "monokai"),
            show_thinking=bool(display.get("show_thinking", False)),
        )

        if not config.token:
            if config.is_local:
                config.token = "unused"
            else:
                _log.warning("HUGGINGFACE_TOKEN not set but using remote API %s", config.base_url)
                config.token = "missing-token"
        return config

    def save(self) -> None:
        """Save configuration to file."""
        with open(self.config_path, "w") as f:
            yaml.dump(self.data, f, default_flow_style=False)
