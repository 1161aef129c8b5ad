# tests/conftest.py

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cies.credibility.schema import EvaluationInput
from cies.knowledge.store import FactStore


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep a developer's CIES_FACTS_PATH from leaking into tests."""
    monkeypatch.delenv("CIES_FACTS_PATH", raising=False)


@pytest.fixture
def fact_store(tmp_path):
    return FactStore(tmp_path / "facts.pl")


@pytest.fixture
def make_input():
    """Factory for EvaluationInput objects in the JSON input shape."""

    def _make(content="Some studies suggest renewables are overrated", **overrides):
        data = {
            "content": content,
            "source": {"type": "blog", "reputation": 0.5},
            "author": {"isAnonymous": False, "knownExpert": False},
            "metadata": {
                "hasEmotionalLanguage": False,
                "hasCitations": True,
                "citationCount": 2,
                "hasReferences": False,
            },
        }
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(data.get(key), dict):
                data[key] = {**data[key], **value}
            else:
                data[key] = value
        return EvaluationInput.model_validate(data)

    return _make
