import yaml
from pathlib import Path
import copy
import os
from typing import Any, Dict, Optional
import logging
import re

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


def _as_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


def _as_float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


DEFAULT_CONFIG: Dict[str, Any] = {
    "mock": {
        "enabled": "${MOCK_MODE}",
        "delay_ms": 500,
        "failure_rate": 0.0,
    },
    "cache": {
        "dir": "~/.student_portal/cache",
    },
    "database": {
        "path": "~/.student_portal/portal.db",
    },
    "intranet": {
        "api_url": "${INTRANET_API_URL}",
        "api_key": "${INTRANET_API_KEY}",
    },
    "lms": {
        "api_url": "${BLACKBOARD_API_URL}",
        "api_key": "${BLACKBOARD_API_KEY}",
        "api_secret": "${BLACKBOARD_API_SECRET}",
    },
    "jwt": {
        "secret": "${JWT_SECRET}",
        "refresh_secret": "${REFRESH_TOKEN_SECRET}",
        "access_ttl_seconds": 3600,
        "refresh_ttl_seconds": 604800,
    },
    "openai": {
        "api_key": "${OPENAI_API_KEY}",
        "model": "gpt-4",
        "max_tokens": 500,
    },
    "logging": {
        "level": "INFO",
    },
}


class Config:
    def __init__(self, config_path: Optional[str] = None, data: Optional[Dict[str, Any]] = None):
        logging.debug("Initializing Config class")

        if config_path:
            self.config_file = Path(config_path).resolve()
            self.config_dir = self.config_file.parent
        else:
            self.config_dir = Path.cwd()
            self.config_file = self.config_dir / "config.yaml"

        if data is not None:
            # In-memory config: no file, no .env
            self.data = self._substitute_env_vars(copy.deepcopy(data))
            return

        logging.debug(f"Using config file: {self.config_file}")

        # Load environment variables from .env file
        self._load_env_file()

        self._ensure_config_exists()
        self._load_config()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Build a config without touching the filesystem (tests, embedding)."""
        return cls(data=data)

    def _ensure_config_exists(self) -> None:
        """Create default config if it doesn't exist"""
        if not self.config_dir.exists():
            logging.info(f"Creating config directory: {self.config_dir}")
            self.config_dir.mkdir(parents=True)

        if not self.config_file.exists():
            logging.info(f"Creating default config file: {self.config_file}")
            self.config_file.write_text(yaml.safe_dump(DEFAULT_CONFIG, sort_keys=False))

    def _load_env_file(self) -> None:
        """Load environment variables from .env file"""
        env_files = [
            self.config_dir / ".env",
            self.config_dir.parent / ".env",
            Path.cwd() / ".env"
        ]

        env_file = None
        for path in env_files:
            if path.exists():
                env_file = path
                break

        if not env_file:
            logging.debug("No .env file found, skipping environment variable loading")
            return

        logging.info(f"Loading environment variables from: {env_file}")
        try:
            with open(env_file, 'r') as f:
                for line in f:
                    line = line.strip()
                    if not line or line.startswith('#'):
                        continue

                    match = re.match(r'^([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*)$', line)
                    if match:
                        key, value = match.groups()
                        value = value.strip('"').strip("'")
                        # Real environment wins over .env
                        if key not in os.environ:
                            os.environ[key] = value
                            logging.debug(f"Loaded env var: {key}")
        except OSError as e:
            logging.warning(f"Error loading .env file: {e}")

    def _substitute_env_vars(self, data: Any) -> Any:
        """Recursively substitute ${VAR_NAME} / $VAR_NAME references.
        Unset variables resolve to None so defaults apply."""
        if isinstance(data, dict):
            return {key: self._substitute_env_vars(value) for key, value in data.items()}
        elif isinstance(data, list):
            return [self._substitute_env_vars(item) for item in data]
        elif isinstance(data, str):
            if data.startswith('${') and data.endswith('}'):
                return os.environ.get(data[2:-1])
            elif data.startswith('$') and len(data) > 1:
                return os.environ.get(data[1:])
            return data
        else:
            return data

    def _load_config(self) -> None:
        """Load configuration from file"""
        try:
            logging.debug(f"Loading config from: {self.config_file}")
            with open(self.config_file) as f:
                new_data = yaml.safe_load(f)

            if not isinstance(new_data, dict):
                raise ValueError("Invalid config format: root must be a dictionary")

            self.data = self._substitute_env_vars(new_data)

        except (OSError, ValueError, yaml.YAMLError) as e:
            logging.error(f"Error loading config: {e}")
            logging.info("Using default configuration")
            self.data = self._substitute_env_vars(copy.deepcopy(DEFAULT_CONFIG))

    def section(self, name: str) -> Dict[str, Any]:
        """Return a config section as a dict (empty if missing)."""
        value = self.data.get(name)
        return value if isinstance(value, dict) else {}

    @property
    def mock_mode(self) -> bool:
        return _as_bool(self.section("mock").get("enabled"), default=False)

    @property
    def mock_delay_ms(self) -> int:
        return _as_int(self.section("mock").get("delay_ms"), 500)

    @property
    def mock_failure_rate(self) -> float:
        rate = _as_float(self.section("mock").get("failure_rate"), 0.0)
        return min(max(rate, 0.0), 1.0)

    @property
    def cache_dir(self) -> Optional[str]:
        return self.section("cache").get("dir")

    @property
    def log_level(self) -> str:
        return str(self.section("logging").get("level") or "INFO").upper()

    @property
    def log_file(self) -> Optional[str]:
        path = self.section("logging").get("file")
        return os.path.expanduser(path) if path else None
