"""YAML file operations service."""

import logging
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict

import yaml

logger = logging.getLogger("certctl")


class YAMLService:
    """Service for YAML file operations."""

    @staticmethod
    def load_yaml(file_path: Path) -> Dict[str, Any]:
        """
        Load YAML file and return as dictionary.

        Args:
            file_path: Path to YAML file

        Returns:
            Parsed YAML content as dictionary

        Raises:
            FileNotFoundError: If file doesn't exist
            yaml.YAMLError: If file is not valid YAML
        """
        if not file_path.exists():
            raise FileNotFoundError(f"YAML file not found: {file_path}")

        with open(file_path, "r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
                logger.debug(f"Loaded YAML from: {file_path}")
                return data or {}
            except yaml.YAMLError as e:
                logger.error(f"Error parsing YAML file {file_path}: {e}")
                raise

    @staticmethod
    def save_yaml(file_path: Path, data: Dict[str, Any]) -> None:
        """
        Save dictionary to YAML file.

        Args:
            file_path: Path to save YAML file
            data: Plain data (str, int, list, dict) to save

        Raises:
            yaml.YAMLError: If data cannot be serialized to YAML
        """
        file_path.parent.mkdir(parents=True, exist_ok=True)

        with open(file_path, "w", encoding="utf-8") as f:
            try:
                yaml.safe_dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)
                logger.debug(f"Saved YAML to: {file_path}")
            except yaml.YAMLError as e:
                logger.error(f"Error saving YAML file {file_path}: {e}")
                raise

    @staticmethod
    def load_config_yaml(file_path: Path) -> Dict[str, Any]:
        """
        Load a metadata record with datetime parsing.

        Args:
            file_path: Path to record YAML file

        Returns:
            Parsed record
        """
        data = YAMLService.load_yaml(file_path)
        return YAMLService._parse_datetimes(data)

    @staticmethod
    def save_config_yaml(file_path: Path, data: Dict[str, Any]) -> None:
        """
        Save a metadata record to YAML with datetime and Enum formatting.

        Args:
            file_path: Path to save record YAML
            data: Record data, typically from ``model_dump()``
        """
        YAMLService.save_yaml(file_path, YAMLService._format_value(data))

    @staticmethod
    def _format_value(value: Any) -> Any:
        """Recursively convert datetime and Enum objects to plain scalars."""
        if isinstance(value, datetime):
            return value.isoformat()
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, dict):
            return {key: YAMLService._format_value(item) for key, item in value.items()}
        if isinstance(value, (list, tuple)):
            return [YAMLService._format_value(item) for item in value]
        return value

    @staticmethod
    def _parse_datetimes(data: Dict[str, Any]) -> Dict[str, Any]:
        """Parse ISO datetime strings in known fields, descending into nested records."""
        datetime_fields = ["created_at", "not_before", "not_after"]
        for key, value in data.items():
            if key in datetime_fields and isinstance(value, str):
                try:
                    data[key] = datetime.fromisoformat(value.replace("Z", "+00:00"))
                except ValueError as e:
                    logger.warning(f"Error parsing datetime field {key}: {e}")
            elif isinstance(value, dict):
                data[key] = YAMLService._parse_datetimes(value)
        return data
