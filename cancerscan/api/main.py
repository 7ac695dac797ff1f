from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI

from ..ai.model_store import ModelProvider
from ..datalake.storage import FileSystemPredictionStore, PredictionStore
from .config_loader import AppConfig, load_config
from .pipeline import PredictionPipeline
from .server import create_app

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build argument parser.

    Configuration is loaded from config/cancerscan.json; CLI flags are only for
    quick overrides.
    """
    parser = argparse.ArgumentParser(
        description="Run the cancer screening prediction API",
        epilog="Configuration is loaded from config/cancerscan.json. "
        "CLI arguments override config file settings.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default="config/cancerscan.json",
        help="Path to JSON configuration file (default: config/cancerscan.json)",
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Override server host (default: from config file)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Override server port (default: from config file)",
    )
    return parser


def build_model_provider(cfg: AppConfig) -> ModelProvider:
    from ..ai.artifacts import GcsArtifactStore, LocalArtifactStore

    if cfg.model.source == "local":
        store = LocalArtifactStore(Path(cfg.model.local_dir))
        logger.info("Model source local dir=%s", cfg.model.local_dir)
    else:
        store = GcsArtifactStore(
            bucket_name=cfg.model.bucket_name,
            cache_dir=Path(cfg.model.cache_dir),
        )
        logger.info("Model source gcs bucket=%s", cfg.model.bucket_name)
    return ModelProvider(store, artifact_name=cfg.model.artifact_name)


def build_store(cfg: AppConfig) -> PredictionStore:
    if cfg.storage.backend == "filesystem":
        logger.info("Prediction store filesystem root=%s", cfg.storage.root)
        return FileSystemPredictionStore(Path(cfg.storage.root))
    from ..datalake.firestore import FirestorePredictionStore

    logger.info("Prediction store firestore collection=%s", cfg.storage.collection)
    return FirestorePredictionStore(collection=cfg.storage.collection)


def build_app(cfg: AppConfig) -> FastAPI:
    pipeline = PredictionPipeline(
        model_provider=build_model_provider(cfg),
        store=build_store(cfg),
    )
    return create_app(pipeline, max_upload_bytes=cfg.upload.max_bytes)


def main() -> None:
    load_dotenv()
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=logging.INFO, format="%(levelname)s [%(name)s] %(message)s"
        )
    args = build_parser().parse_args()

    config_path = Path(args.config)
    try:
        cfg = load_config(config_path if config_path.exists() else None)
    except ValueError as exc:
        logger.error("Failed to load configuration %s: %s", config_path, exc)
        sys.exit(1)
    if not config_path.exists():
        logger.info(
            "Configuration file %s not found; using defaults. "
            "Copy config/cancerscan.example.json to get started.",
            config_path,
        )

    if args.host:
        cfg.server.host = args.host
    if args.port:
        cfg.server.port = args.port

    logger.info("Server configuration: %s:%d", cfg.server.host, cfg.server.port)
    app = build_app(cfg)
    uvicorn.run(app, host=cfg.server.host, port=cfg.server.port)


if __name__ == "__main__":
    main()
