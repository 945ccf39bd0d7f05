"""Configuration loading for blockgen (.blockgen.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml

CONFIG_FILENAME = ".blockgen.yml"

DEFAULT_BASE_DIR = "blockgen-output"
DEFAULT_NAMESPACE = "blockgen"
DEFAULT_BLOCK_VERSION = "1.0.0"
DEFAULT_SCRIPT_DEPENDENCIES: Tuple[str, ...] = (
    "wp-block-editor",
    "wp-blocks",
    "wp-element",
    "wp-i18n",
    "wp-server-side-render",
)
SCSS_COMPILERS = ("dart-sass", "passthrough")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class OutputConfig:
    """Where generated files are written."""

    base_dir: Optional[str] = None


@dataclass
class BlocksConfig:
    """Block manifest defaults written into block.json and index.asset.php."""

    namespace: Optional[str] = None
    textdomain: Optional[str] = None
    version: Optional[str] = None
    script_dependencies: List[str] = field(default_factory=list)


@dataclass
class ScssConfig:
    """SCSS compiler selection."""

    compiler: Optional[str] = None
    executable: Optional[str] = None
    timeout: Optional[float] = None


@dataclass
class GeneratorsConfig:
    """Generator enablement; an empty list enables every registered generator."""

    enabled: List[str] = field(default_factory=list)


@dataclass
class StoreConfig:
    """Location of the JSON record store used by the CLI and service."""

    path: Optional[str] = None


@dataclass
class BlockgenConfig:
    """Represents the settings defined in .blockgen.yml."""

    root: Path
    output: OutputConfig = field(default_factory=OutputConfig)
    blocks: BlocksConfig = field(default_factory=BlocksConfig)
    scss: ScssConfig = field(default_factory=ScssConfig)
    generators: GeneratorsConfig = field(default_factory=GeneratorsConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    log_file: Optional[Path] = None

    @property
    def base_dir(self) -> Path:
        return _resolve_relative(self.root, self.output.base_dir or DEFAULT_BASE_DIR)

    @property
    def store_path(self) -> Optional[Path]:
        if not self.store.path:
            return None
        return _resolve_relative(self.root, self.store.path)


@dataclass(frozen=True)
class GenerationSettings:
    """Immutable settings shared by every pipeline component.

    Built once at startup and passed explicitly to the coordinator, processor,
    generators and writer instead of being looked up from globals.
    """

    base_dir: Path
    namespace: str = DEFAULT_NAMESPACE
    textdomain: str = DEFAULT_NAMESPACE
    block_version: str = DEFAULT_BLOCK_VERSION
    script_dependencies: Tuple[str, ...] = DEFAULT_SCRIPT_DEPENDENCIES

    @classmethod
    def from_config(cls, config: BlockgenConfig) -> "GenerationSettings":
        namespace = config.blocks.namespace or DEFAULT_NAMESPACE
        dependencies = tuple(config.blocks.script_dependencies) or DEFAULT_SCRIPT_DEPENDENCIES
        return cls(
            base_dir=config.base_dir,
            namespace=namespace,
            textdomain=config.blocks.textdomain or namespace,
            block_version=config.blocks.version or DEFAULT_BLOCK_VERSION,
            script_dependencies=dependencies,
        )

    @property
    def blocks_dir(self) -> Path:
        return self.base_dir / "blocks"

    @property
    def symbols_dir(self) -> Path:
        return self.base_dir / "symbols"

    @property
    def scss_dir(self) -> Path:
        return self.base_dir / "scss"


def load_config(config_path: Path) -> BlockgenConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return BlockgenConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    output_data = _as_dict(data.get("output"))
    output = OutputConfig(base_dir=_as_str(output_data.get("base_dir")))

    blocks_data = _as_dict(data.get("blocks"))
    blocks = BlocksConfig(
        namespace=_as_slug(blocks_data.get("namespace"), "blocks.namespace"),
        textdomain=_as_str(blocks_data.get("textdomain")),
        version=_as_str(blocks_data.get("version")),
        script_dependencies=_as_str_list(blocks_data.get("script_dependencies")),
    )

    scss_data = _as_dict(data.get("scss"))
    compiler = _as_str(scss_data.get("compiler"))
    if compiler is not None and compiler not in SCSS_COMPILERS:
        allowed = ", ".join(SCSS_COMPILERS)
        raise ConfigError(f"scss.compiler must be one of {allowed}, got {compiler!r}")
    timeout = _as_float(scss_data.get("timeout"))
    if timeout is not None and timeout <= 0:
        raise ConfigError("scss.timeout must be positive")
    scss = ScssConfig(
        compiler=compiler,
        executable=_as_str(scss_data.get("executable")),
        timeout=timeout,
    )

    generators_data = _as_dict(data.get("generators"))
    generators = GeneratorsConfig(enabled=_as_str_list(generators_data.get("enabled")))

    store_data = _as_dict(data.get("store"))
    store = StoreConfig(path=_as_str(store_data.get("path")))

    logging_data = _as_dict(data.get("logging"))
    log_file_str = _as_str(logging_data.get("file"))
    log_file = _resolve_relative(root, log_file_str) if log_file_str else None

    return BlockgenConfig(
        root=root,
        output=output,
        blocks=blocks,
        scss=scss,
        generators=generators,
        store=store,
        log_file=log_file,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _resolve_relative(root: Path, value: str) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = root / path
    return path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return str(value).lower()
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_slug(value: Any, key: str) -> Optional[str]:
    text = _as_str(value)
    if text is None:
        return None
    if not text or "/" in text or text.strip() != text:
        raise ConfigError(f"{key} must be a non-empty name without slashes")
    return text


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "BlockgenConfig",
    "BlocksConfig",
    "ConfigError",
    "GenerationSettings",
    "GeneratorsConfig",
    "OutputConfig",
    "ScssConfig",
    "StoreConfig",
    "load_config",
]
