# src/cies/core/__init__.py

"""
Core orchestration for CIES.
Manages configuration and the evaluate-or-reuse workflow.
"""

from .config import load_config, CIESConfig
from .coordinator import EvaluationCoordinator, content_identifier

__all__ = [
    "load_config",
    "CIESConfig",
    "EvaluationCoordinator",
    "content_identifier",
]
