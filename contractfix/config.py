"""
Configuration system for contractfix

Provides configuration management with support for files and environment variables.
Includes validation, default value handling, and configuration merging.
"""

import os
import json
import yaml
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional, Any
import logging

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


PRECONDITION_KIND_NAMES = ["requires", "replacement", "debug_assert"]


class ConfigurationManager:
    """Manages configuration loading, validation, and merging."""

    DEFAULT_CONFIG_PATHS = [
        "contractfix.json",
        "contractfix.yaml",
        "contractfix.yml",
        ".contractfix.json",
        ".contractfix.yaml",
        ".contractfix.yml",
        os.path.expanduser("~/.contractfix.json"),
        os.path.expanduser("~/.contractfix.yaml"),
    ]

    @staticmethod
    def find_config_file(search_paths: Optional[List[str]] = None) -> Optional[str]:
        """Find the first existing configuration file."""
        paths = search_paths or ConfigurationManager.DEFAULT_CONFIG_PATHS

        for path in paths:
            if os.path.exists(path):
                return path
        return None

    @staticmethod
    def load_config_file(config_path: str) -> Dict[str, Any]:
        """Load configuration from file (JSON or YAML)."""
        if not os.path.exists(config_path):
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                if config_path.endswith((".yaml", ".yml")):
                    data = yaml.safe_load(f) or {}
                else:
                    data = json.load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Invalid configuration file format: {e}")
        except OSError as e:
            raise ConfigurationError(f"Error reading configuration file: {e}")

        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")
        return data

    @staticmethod
    def load_env_config() -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config: Dict[str, Any] = {}

        library = {}
        if os.getenv("CONTRACTFIX_LEGACY_CLASS"):
            library["legacy_class"] = os.getenv("CONTRACTFIX_LEGACY_CLASS")
        if os.getenv("CONTRACTFIX_REPLACEMENT_CLASS"):
            library["replacement_class"] = os.getenv("CONTRACTFIX_REPLACEMENT_CLASS")
        if os.getenv("CONTRACTFIX_REPLACEMENT_MODULE"):
            library["replacement_module"] = os.getenv("CONTRACTFIX_REPLACEMENT_MODULE")
        if library:
            config["library"] = library

        analysis: Dict[str, Any] = {}
        if os.getenv("CONTRACTFIX_EXCLUDE_PATTERNS"):
            analysis["exclude_patterns"] = os.getenv("CONTRACTFIX_EXCLUDE_PATTERNS").split(",")

        if os.getenv("CONTRACTFIX_ENABLED_RULES"):
            analysis["enabled_rules"] = os.getenv("CONTRACTFIX_ENABLED_RULES").split(",")

        if os.getenv("CONTRACTFIX_SEMANTIC_DEDUP"):
            analysis["semantic_dedup"] = os.getenv("CONTRACTFIX_SEMANTIC_DEDUP").lower() == "true"

        if os.getenv("CONTRACTFIX_REQUIRE_RECIPROCAL_LINK"):
            analysis["require_reciprocal_link"] = (
                os.getenv("CONTRACTFIX_REQUIRE_RECIPROCAL_LINK").lower() == "true"
            )
        if analysis:
            config["analysis"] = analysis

        refactoring = {}
        if os.getenv("CONTRACTFIX_BACKUP_ENABLED"):
            refactoring["backup_enabled"] = (
                os.getenv("CONTRACTFIX_BACKUP_ENABLED").lower() == "true"
            )
        if refactoring:
            config["refactoring"] = refactoring

        return config

    @staticmethod
    def merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
        """Merge multiple configuration dictionaries, with later ones taking precedence."""
        result: Dict[str, Any] = {}

        for config in configs:
            if not config:
                continue

            for key, value in config.items():
                if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                    result[key] = ConfigurationManager.merge_configs(result[key], value)
                else:
                    result[key] = value

        return result

    @staticmethod
    def validate_config(config_data: Dict[str, Any]) -> None:
        """Validate configuration data."""
        if "library" in config_data:
            library = config_data["library"]
            for key in ("legacy_class", "debug_class", "replacement_class"):
                if key in library and (not isinstance(library[key], str) or not library[key]):
                    raise ConfigurationError(f"library.{key} must be a non-empty string")

            defaults = ContractLibraryConfig()
            names = [
                library.get(k, getattr(defaults, k))
                for k in ("legacy_class", "debug_class", "replacement_class")
            ]
            if len(names) != len(set(names)):
                raise ConfigurationError("library class names must be distinct")

        if "analysis" in config_data:
            analysis = config_data["analysis"]
            for key in ("present_kinds", "inherited_kinds"):
                if key not in analysis:
                    continue
                kinds = analysis[key]
                if not isinstance(kinds, list) or not kinds:
                    raise ConfigurationError(f"analysis.{key} must be a non-empty list")
                for kind in kinds:
                    if kind not in PRECONDITION_KIND_NAMES:
                        raise ConfigurationError(
                            f"analysis.{key} entries must be one of: {PRECONDITION_KIND_NAMES}"
                        )

        if "exceptions" in config_data:
            exceptions = config_data["exceptions"]
            if "param_names" in exceptions and not exceptions["param_names"]:
                raise ConfigurationError("exceptions.param_names must not be empty")


@dataclass
class ContractLibraryConfig:
    """Names of the legacy contract library and of its successors."""

    legacy_class: str = "Contract"
    debug_class: str = "Debug"
    replacement_class: str = "Check"
    debug_module: str = "contracts.debug"
    replacement_module: str = "checks"

    requires_methods: List[str] = field(default_factory=lambda: ["requires"])
    assert_methods: List[str] = field(default_factory=lambda: ["assert_"])
    assume_methods: List[str] = field(default_factory=lambda: ["assume"])
    removable_methods: List[str] = field(
        default_factory=lambda: ["ensures", "ensures_on_throw", "invariant", "end_contract_block"]
    )

    contract_class_decorator: str = "contract_class"
    contract_class_for_decorator: str = "contract_class_for"
    invariant_method_decorator: str = "contract_invariant_method"

    condition_text_keyword: str = "condition_string"
    message_keywords: List[str] = field(default_factory=lambda: ["message", "user_message"])


@dataclass
class ExceptionConfig:
    """Names used when lowering typed preconditions to ``raise`` statements."""

    argument_error: str = "ArgumentError"
    argument_none_error: str = "ArgumentNoneError"
    param_names: List[str] = field(default_factory=lambda: ["param", "param_name", "paramName"])
    message_name: str = "message"
    inner_exception_names: List[str] = field(
        default_factory=lambda: ["inner", "inner_exception", "cause"]
    )


@dataclass
class AnalysisConfig:
    """Configuration for analysis operations."""

    include_patterns: List[str] = field(default_factory=lambda: ["**/*.py"])
    exclude_patterns: List[str] = field(
        default_factory=lambda: [
            "**/__pycache__/**",
            "**/.*/**",
            "**/build/**",
            "**/dist/**",
            "**/.venv/**",
            "**/venv/**",
        ]
    )
    present_kinds: List[str] = field(default_factory=lambda: list(PRECONDITION_KIND_NAMES))
    inherited_kinds: List[str] = field(default_factory=lambda: ["requires"])
    semantic_dedup: bool = True
    require_reciprocal_link: bool = True
    enabled_rules: List[str] = field(
        default_factory=lambda: ["CR01", "CR02", "CR04", "CR05", "CR06", "CR13"]
    )


@dataclass
class RefactoringConfig:
    """Configuration for applying fixes."""

    backup_enabled: bool = True
    backup_suffix: str = ".bak"


@dataclass
class ContractFixConfig:
    """Main configuration class for contractfix."""

    library: ContractLibraryConfig = field(default_factory=ContractLibraryConfig)
    exceptions: ExceptionConfig = field(default_factory=ExceptionConfig)
    analysis_settings: AnalysisConfig = field(default_factory=AnalysisConfig)
    refactoring_settings: RefactoringConfig = field(default_factory=RefactoringConfig)

    @classmethod
    def default(cls) -> "ContractFixConfig":
        """Create default configuration."""
        return cls()

    @classmethod
    def load(
        cls,
        config_path: Optional[str] = None,
        use_env: bool = True,
        validate: bool = True,
    ) -> "ContractFixConfig":
        """
        Load configuration from multiple sources with precedence:
        1. Default values
        2. Configuration file
        3. Environment variables (if use_env=True)

        Args:
            config_path: Path to configuration file. If None, searches for default files.
            use_env: Whether to load environment variables
            validate: Whether to validate the configuration
        """
        configs_to_merge = []

        file_config: Dict[str, Any] = {}
        if config_path:
            file_config = ConfigurationManager.load_config_file(config_path)
        else:
            found_config = ConfigurationManager.find_config_file()
            if found_config:
                file_config = ConfigurationManager.load_config_file(found_config)
                logger.info(f"Loaded configuration from: {found_config}")

        configs_to_merge.append(file_config)

        if use_env:
            configs_to_merge.append(ConfigurationManager.load_env_config())

        merged_config = ConfigurationManager.merge_configs(*configs_to_merge)

        if validate:
            ConfigurationManager.validate_config(merged_config)

        return cls.from_dict(merged_config)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContractFixConfig":
        """Build a configuration from a merged dictionary, ignoring unknown keys."""
        sections = {
            "library": ContractLibraryConfig(),
            "exceptions": ExceptionConfig(),
            "analysis": AnalysisConfig(),
            "refactoring": RefactoringConfig(),
        }
        for name, section in sections.items():
            for key, value in (data.get(name) or {}).items():
                if hasattr(section, key):
                    setattr(section, key, value)
                else:
                    logger.warning(f"Unknown configuration key ignored: {name}.{key}")

        return cls(
            library=sections["library"],
            exceptions=sections["exceptions"],
            analysis_settings=sections["analysis"],
            refactoring_settings=sections["refactoring"],
        )

    @classmethod
    def from_file(cls, config_path: str) -> "ContractFixConfig":
        """Load configuration from a JSON or YAML file."""
        return cls.load(config_path=config_path, use_env=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "library": asdict(self.library),
            "exceptions": asdict(self.exceptions),
            "analysis": asdict(self.analysis_settings),
            "refactoring": asdict(self.refactoring_settings),
        }

    def save(self, config_path: str) -> None:
        """Save configuration to file (format chosen by extension)."""
        with open(config_path, "w", encoding="utf-8") as f:
            if config_path.endswith((".yaml", ".yml")):
                yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
            else:
                json.dump(self.to_dict(), f, indent=2)


def load_config(config_path: Optional[str] = None, use_env: bool = True) -> ContractFixConfig:
    """Convenience wrapper used by the CLI."""
    return ContractFixConfig.load(config_path=config_path, use_env=use_env)
