# src/cies/core/config.py

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)


class StoreConfig(BaseModel):
    facts_path: str = "data/facts.pl"


class CredibilityConfig(BaseModel):
    source_weight: float = Field(0.4, ge=0, le=1)
    citation_weight: float = Field(0.3, ge=0, le=1)
    language_weight: float = Field(0.2, ge=0, le=1)
    contradiction_weight: float = Field(0.1, ge=0, le=1)
    points_per_citation: int = 20
    references_bonus: int = 20
    emotional_language_penalty: int = 40
    missing_date_penalty: int = 20
    expert_bonus: int = 20
    anonymous_penalty: int = 30
    default_contradiction_score: float = Field(80, ge=0, le=100)
    suspect_threshold: float = 30
    doubtful_threshold: float = 60
    source_adjustments: Dict[str, int] = Field(default_factory=dict)


class EvaluationConfig(BaseModel):
    identifier_length: int = Field(100, gt=0)
    provenance: str = "auto-evaluation"
    expiration_days: int = Field(365, ge=0)
    max_batch_size: int = Field(10, gt=0)


class CIESConfig(BaseModel):
    """
    Main configuration model for CIES.
    """

    store: StoreConfig = Field(default_factory=StoreConfig)
    credibility: CredibilityConfig = Field(default_factory=CredibilityConfig)
    evaluation: EvaluationConfig = Field(default_factory=EvaluationConfig)

    @field_validator("store", mode="before")
    @classmethod
    def load_store_from_env(cls, v: Any) -> Any:
        """Override the facts path with CIES_FACTS_PATH if present."""
        if isinstance(v, StoreConfig):
            v = v.model_dump()
        if not isinstance(v, dict):
            v = {}

        if "CIES_FACTS_PATH" in os.environ:
            v["facts_path"] = os.environ["CIES_FACTS_PATH"]

        return v

    class Config:
        # Defaults also go through the env override
        validate_default = True


def load_config(config_path: Optional[Union[str, Path]] = None) -> CIESConfig:
    """
    Load CIES configuration from YAML file.

    Args:
        config_path: Path to config.yaml (default: ./config/config.yaml)

    Returns:
        Validated CIESConfig instance.
    """
    if config_path is None:
        config_path = Path("config") / "config.yaml"
    else:
        config_path = Path(config_path)

    config_data: Dict[str, Any] = {}
    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f) or {}
            logger.info(f"Loaded configuration from {config_path}")
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config file {config_path}: {e}")
    else:
        logger.info(f"Config file not found at {config_path}, using defaults")

    # Create config instance (env vars override file)
    config = CIESConfig(**config_data)

    logger.debug("CIES configuration loaded with settings:")
    logger.debug(f"  Facts path: {config.store.facts_path}")
    logger.debug(
        f"  Weights: source={config.credibility.source_weight}, "
        f"citation={config.credibility.citation_weight}, "
        f"language={config.credibility.language_weight}, "
        f"contradiction={config.credibility.contradiction_weight}"
    )
    logger.debug(f"  Max batch size: {config.evaluation.max_batch_size}")

    return config
