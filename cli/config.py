"""Configuration management for the AssetVault CLI."""

import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from common.constants import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    DEFAULT_RETRY_DELAY_SECONDS,
    DEFAULT_STORE_HOST,
)
from common.logging_config import get_logger
from uploader.schemas import ActorConfig

logger = get_logger(__name__)


class Config:
    """Manages CLI configuration stored in JSON file."""

    DEFAULT_CONFIG = {
        "store_host": DEFAULT_STORE_HOST,
        "canister_id": None,
        "is_production": False,
        "timeout": DEFAULT_REQUEST_TIMEOUT_SECONDS,
        "max_retries": DEFAULT_MAX_RETRIES,
        "retry_delay": DEFAULT_RETRY_DELAY_SECONDS,
    }

    ENV_OVERRIDES = {
        "ASSET_STORE_HOST": "store_host",
        "ASSET_STORE_CANISTER_ID": "canister_id",
    }

    def __init__(self, config_path: Path):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.assetvault/config.json)
        """
        self.config_path = config_path
        self.data = self._load()

    def _load(self) -> dict:
        """
        Load configuration from file, creating defaults if necessary.

        Returns:
            Configuration dictionary
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            self.config_path = Path(tempfile.gettempdir()) / '.assetvault' / 'config.json'
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

        config = self.DEFAULT_CONFIG.copy()

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    config.update(json.load(f))
            except (json.JSONDecodeError, IOError) as e:
                backup_path = self.config_path.with_suffix('.json.bak')
                logger.warning(f"Config file unreadable, backing up to {backup_path}: {e}")
                try:
                    shutil.copy(self.config_path, backup_path)
                except IOError as copy_error:
                    logger.warning(f"Could not back up config file: {copy_error}")
                config = self.DEFAULT_CONFIG.copy()
        else:
            try:
                with open(self.config_path, 'w') as f:
                    json.dump(config, f, indent=2)
            except IOError as e:
                logger.warning(f"Could not write default config to {self.config_path}: {e}")

        for env_name, key in self.ENV_OVERRIDES.items():
            if os.environ.get(env_name):
                config[key] = os.environ[env_name]

        return config

    def save(self) -> None:
        """Save current configuration to file."""
        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.data, f, indent=2)
        except IOError as e:
            logger.warning(f"Could not save config to {self.config_path}: {e}")

    def get_identity(self) -> Optional[str]:
        """
        Get stored identity.

        Returns:
            Identity string or None if not set
        """
        return self.data.get('identity')

    def set_identity(self, identity: str) -> None:
        """
        Set identity and save to file.

        Args:
            identity: Credential sent as bearer token to the store
        """
        self.data['identity'] = identity
        self.save()

    def get_actor_config(self) -> ActorConfig:
        """
        Build the storage actor configuration.

        Returns:
            ActorConfig with host, canister id, identity and timeout
        """
        return ActorConfig(
            canister_id=self.data.get('canister_id'),
            identity=self.get_identity(),
            host=self.data.get('store_host', DEFAULT_STORE_HOST),
            is_production=bool(self.data.get('is_production', False)),
            timeout=float(self.data.get('timeout', DEFAULT_REQUEST_TIMEOUT_SECONDS)),
        )

    def get_retry_config(self) -> dict:
        """
        Get retry configuration.

        Returns:
            Dictionary with 'max_retries' and 'retry_delay'
        """
        return {
            'max_retries': int(self.data.get('max_retries', DEFAULT_MAX_RETRIES)),
            'retry_delay': float(self.data.get('retry_delay', DEFAULT_RETRY_DELAY_SECONDS)),
        }
