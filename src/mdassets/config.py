"""Configuration loader for mdassets.toml."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

CONFIG_FILENAME = "mdassets.toml"

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
DEFAULT_ACCEPT = "image/webp,image/apng,image/svg+xml,image/*,*/*;q=0.8"
DEFAULT_ACCEPT_LANGUAGE = "zh-CN,zh;q=0.9,en;q=0.8"


@dataclass
class AssetsConfig:
    """Asset directory layout."""
    dir: str = "assets"
    backup_prefix: str = "assets_bak_"
    pattern: str = "*.md"


@dataclass
class FetchConfig:
    """Remote image retrieval settings."""
    max_attempts: int = 3
    base_delay: float = 2.0
    timeout: float = 60.0
    max_bytes: int = 50 * 1024 * 1024
    verify_tls: bool = False
    user_agent: str = DEFAULT_USER_AGENT
    accept: str = DEFAULT_ACCEPT
    accept_language: str = DEFAULT_ACCEPT_LANGUAGE


@dataclass
class MdAssetsConfig:
    """Complete mdassets configuration."""
    assets: AssetsConfig = field(default_factory=AssetsConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    source: Path | None = None


def load_config(config_path: Path | None = None, target_path: Path | None = None) -> MdAssetsConfig:
    """
    Load configuration from mdassets.toml.
    
    Search order:
    1. config_path (if provided)
    2. cwd/mdassets.toml
    3. target_path/mdassets.toml
    
    Args:
        config_path: Explicit path to config file
        target_path: Target directory for fallback search
    
    Returns:
        MdAssetsConfig with resolved settings
    
    Raises:
        FileNotFoundError: If config_path is given but does not exist
    """
    if config_path is not None and not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    
    toml_data: dict[str, Any] = {}
    source: Path | None = None
    
    search_paths = []
    if config_path:
        search_paths.append(config_path)
    search_paths.append(Path.cwd() / CONFIG_FILENAME)
    if target_path:
        search_paths.append(target_path / CONFIG_FILENAME)
    
    for path in search_paths:
        if path.exists():
            with open(path, "rb") as f:
                toml_data = tomllib.load(f)
            source = path
            break
    
    assets_data = toml_data.get("assets", {})
    defaults = AssetsConfig()
    assets_dir = assets_data.get("dir", defaults.dir)
    assets_config = AssetsConfig(
        dir=assets_dir,
        backup_prefix=assets_data.get("backup_prefix", f"{assets_dir}_bak_"),
        pattern=assets_data.get("pattern", defaults.pattern),
    )
    
    fetch_data = toml_data.get("fetch", {})
    fetch_defaults = FetchConfig()
    fetch_config = FetchConfig(
        max_attempts=max(1, int(fetch_data.get("max_attempts", fetch_defaults.max_attempts))),
        base_delay=float(fetch_data.get("base_delay", fetch_defaults.base_delay)),
        timeout=float(fetch_data.get("timeout", fetch_defaults.timeout)),
        max_bytes=int(fetch_data.get("max_bytes", fetch_defaults.max_bytes)),
        verify_tls=bool(fetch_data.get("verify_tls", fetch_defaults.verify_tls)),
        user_agent=fetch_data.get("user_agent", fetch_defaults.user_agent),
        accept=fetch_data.get("accept", fetch_defaults.accept),
        accept_language=fetch_data.get("accept_language", fetch_defaults.accept_language),
    )
    
    return MdAssetsConfig(
        assets=assets_config,
        fetch=fetch_config,
        source=source,
    )
