"""Runtime wiring helper for the CLI."""

from dataclasses import dataclass
from pathlib import Path

from .adapters.http_client import RequestsHttpClient
from .adapters.log_sink import LoggingSink
from .config import MdAssetsConfig, load_config
from .core.ports import LogSink
from .pipeline import AssetPipeline


@dataclass
class Runtime:
    """Container for all wired components."""
    config: MdAssetsConfig
    client: RequestsHttpClient
    sink: LogSink
    pipeline: AssetPipeline


def build_runtime(
    target_path: Path | None = None,
    config_path: Path | None = None,
    sink: LogSink | None = None,
) -> Runtime:
    """Build and wire all components for one target directory."""
    config = load_config(config_path=config_path, target_path=target_path)
    
    sink = sink or LoggingSink()
    client = RequestsHttpClient(config.fetch)
    pipeline = AssetPipeline(client, sink, config)
    
    return Runtime(
        config=config,
        client=client,
        sink=sink,
        pipeline=pipeline,
    )
