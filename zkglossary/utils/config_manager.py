"""
Configuration manager for loading and saving settings from YAML/JSON files.
"""
import yaml
import json
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, field, asdict, fields
import os
from dotenv import load_dotenv

from ..core.exceptions import InvalidConfigError
from ..core.models import DEFAULT_EXTERNAL_PREFIX, RenderFormat


BOLD_MARKERS = ('**', '__')
ITALIC_MARKERS = ('*', '_')


@dataclass
class GlossaryConfig:
    """Configuration for loading and resolving glossaries."""
    source: Optional[str] = None
    external_prefix: str = DEFAULT_EXTERNAL_PREFIX
    allow_forward_references: bool = True
    case_sensitive_lookup: bool = False


@dataclass
class RenderConfig:
    """Configuration for the renderer."""
    default_format: str = RenderFormat.PLAIN.value
    bold_marker: str = "**"
    italic_marker: str = "*"
    show_related: bool = True
    show_asides: bool = True


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    log_dir: Optional[str] = None
    log_level: str = "INFO"
    console_level: str = "WARNING"
    max_bytes: int = 10_000_000
    backup_count: int = 5
    use_colors: bool = True


@dataclass
class AppConfig:
    """Main application configuration."""
    glossary: GlossaryConfig = field(default_factory=GlossaryConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


_SECTIONS = {
    'glossary': GlossaryConfig,
    'render': RenderConfig,
    'logging': LoggingConfig,
}


class ConfigManager:
    """
    Configuration manager for loading/saving application settings.
    Supports YAML and JSON formats, environment variables, and defaults.

    Loading never writes files; use ``save`` or ``export_template``.
    """

    def __init__(self, config_path: Optional[Path] = None, use_env: bool = True):
        """
        Initialize config manager.

        Args:
            config_path: Path to config file (YAML or JSON)
            use_env: Apply .env and environment variable overrides
        """
        self.config_path = Path(config_path) if config_path else Path("zkglossary.yaml")
        self.use_env = use_env
        self.config: AppConfig = AppConfig()

        if self.use_env:
            load_dotenv()

        if self.config_path.exists():
            self.load()
        elif self.use_env:
            self._apply_env_vars()
            self.validate()

    def load(self) -> AppConfig:
        """
        Load configuration from file.

        Returns:
            AppConfig instance

        Raises:
            InvalidConfigError: On unsupported format, unknown keys or bad values
        """
        if not self.config_path.exists():
            return self.config

        if self.config_path.suffix in ['.yaml', '.yml']:
            data = self._load_yaml()
        elif self.config_path.suffix == '.json':
            data = self._load_json()
        else:
            raise InvalidConfigError(
                f"Unsupported config format: {self.config_path.suffix}",
                field='config_path'
            )

        self.config = self._parse_config(data)

        if self.use_env:
            self._apply_env_vars()

        self.validate()
        return self.config

    def save(self, config: Optional[AppConfig] = None):
        """
        Save configuration to file.

        Args:
            config: Config to save (uses current if None)
        """
        if config:
            self.config = config

        data = asdict(self.config)

        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if self.config_path.suffix == '.json':
            self._save_json(data)
        else:
            self._save_yaml(data)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot notation key.

        Args:
            key: Configuration key (e.g., 'render.default_format')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        value = self.config

        for part in key.split('.'):
            if hasattr(value, part):
                value = getattr(value, part)
            else:
                return default

        return value

    def set(self, key: str, value: Any):
        """
        Set configuration value by dot notation key.

        Args:
            key: Configuration key
            value: Value to set

        Raises:
            KeyError: If the key does not exist
        """
        parts = key.split('.')
        obj = self.config

        for part in parts[:-1]:
            if hasattr(obj, part):
                obj = getattr(obj, part)
            else:
                raise KeyError(f"Invalid config key: {key}")

        if not hasattr(obj, parts[-1]):
            raise KeyError(f"Invalid config key: {key}")

        setattr(obj, parts[-1], value)

    def validate(self) -> None:
        """Check values that other components rely on."""
        self._check_types()

        render = self.config.render
        if render.default_format not in RenderFormat.values():
            raise InvalidConfigError(
                f"Unknown render format: {render.default_format}",
                field='render.default_format'
            )
        if render.bold_marker not in BOLD_MARKERS:
            raise InvalidConfigError(
                f"bold_marker must be one of {BOLD_MARKERS}", field='render.bold_marker'
            )
        if render.italic_marker not in ITALIC_MARKERS:
            raise InvalidConfigError(
                f"italic_marker must be one of {ITALIC_MARKERS}", field='render.italic_marker'
            )
        prefix = self.config.glossary.external_prefix
        if not prefix or prefix != prefix.strip() or ',' in prefix:
            raise InvalidConfigError(
                f"Invalid external prefix: {prefix!r}", field='glossary.external_prefix'
            )

    def _check_types(self):
        """Each field must have the type of its default; None defaults take str."""
        for name, section_cls in _SECTIONS.items():
            section = getattr(self.config, name)
            for f in fields(section_cls):
                value = getattr(section, f.name)
                key = f"{name}.{f.name}"
                if f.default is None:
                    expected = str
                    valid = value is None or isinstance(value, str)
                elif isinstance(f.default, bool):
                    expected = bool
                    valid = isinstance(value, bool)
                elif isinstance(f.default, int):
                    expected = int
                    valid = isinstance(value, int) and not isinstance(value, bool) and value >= 0
                else:
                    expected = type(f.default)
                    valid = isinstance(value, expected)
                if not valid:
                    raise InvalidConfigError(
                        f"'{key}' must be {expected.__name__}, got {value!r}", field=key
                    )

    def _load_yaml(self) -> Dict[str, Any]:
        """Load YAML config file."""
        with open(self.config_path, 'r', encoding='utf-8') as f:
            try:
                return yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise InvalidConfigError(f"Invalid YAML config: {e}", field='config_path') from e

    def _load_json(self) -> Dict[str, Any]:
        """Load JSON config file."""
        with open(self.config_path, 'r', encoding='utf-8') as f:
            try:
                return json.load(f)
            except json.JSONDecodeError as e:
                raise InvalidConfigError(f"Invalid JSON config: {e}", field='config_path') from e

    def _save_yaml(self, data: Dict[str, Any]):
        """Save config as YAML."""
        with open(self.config_path, 'w', encoding='utf-8') as f:
            yaml.dump(data, f, default_flow_style=False, allow_unicode=True, indent=2)

    def _save_json(self, data: Dict[str, Any]):
        """Save config as JSON."""
        with open(self.config_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def _parse_config(self, data: Dict[str, Any]) -> AppConfig:
        """Parse dictionary to AppConfig."""
        if not isinstance(data, dict):
            raise InvalidConfigError("Config root must be a mapping", field='config_path')

        unknown = set(data) - set(_SECTIONS)
        if unknown:
            raise InvalidConfigError(f"Unknown config sections: {sorted(unknown)}")

        config = AppConfig()

        for name, section_cls in _SECTIONS.items():
            values = data.get(name)
            if values is None:
                continue
            if not isinstance(values, dict):
                raise InvalidConfigError(f"Section '{name}' must be a mapping", field=name)
            allowed = {f.name for f in fields(section_cls)}
            bad = set(values) - allowed
            if bad:
                raise InvalidConfigError(
                    f"Unknown keys in '{name}': {sorted(bad)}", field=name
                )
            setattr(config, name, section_cls(**values))

        return config

    def _apply_env_vars(self):
        """Override config with environment variables."""
        if os.getenv('LOG_LEVEL'):
            self.config.logging.log_level = os.getenv('LOG_LEVEL')

        if os.getenv('ZKGLOSSARY_LOG_DIR'):
            self.config.logging.log_dir = os.getenv('ZKGLOSSARY_LOG_DIR')

        if os.getenv('ZKGLOSSARY_FORMAT'):
            self.config.render.default_format = os.getenv('ZKGLOSSARY_FORMAT').lower()

        if os.getenv('ZKGLOSSARY_SOURCE'):
            self.config.glossary.source = os.getenv('ZKGLOSSARY_SOURCE')

        if os.getenv('ZKGLOSSARY_EXTERNAL_PREFIX'):
            self.config.glossary.external_prefix = os.getenv('ZKGLOSSARY_EXTERNAL_PREFIX')

        if os.getenv('ZKGLOSSARY_ALLOW_FORWARD_REFERENCES'):
            self.config.glossary.allow_forward_references = (
                os.getenv('ZKGLOSSARY_ALLOW_FORWARD_REFERENCES').lower() == 'true'
            )

    def export_template(self, output_path: Path):
        """
        Export configuration template with comments.

        Args:
            output_path: Path to save template
        """
        template = """# zkglossary configuration

# Glossary loading and cross-reference checks
glossary:
  source: null                    # Default source file (null = bundled glossary)
  external_prefix: "ext:"         # Marks references that live outside the glossary
  allow_forward_references: true  # Allow references to terms defined later
  case_sensitive_lookup: false    # Case-sensitive fuzzy lookup

# Rendering
render:
  default_format: plain           # plain, emphasized
  bold_marker: "**"               # ** or __
  italic_marker: "*"              # * or _
  show_related: true              # Print related terms
  show_asides: true               # Print asides

# Logging
logging:
  log_dir: null                   # Directory for rotating log files (null = console only)
  log_level: INFO                 # File log level
  console_level: WARNING          # Console (stderr) log level
  max_bytes: 10000000             # Max log file size (10MB)
  backup_count: 5                 # Number of backup files
  use_colors: true                # Colored console output
"""

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(template)
