# src/cies/credibility/scenarios.py

"""
Predefined evaluation scenarios, one per credibility level.
Used by the CLI demo mode and as reference inputs in tests.
"""

from typing import Dict

from cies.credibility.schema import EvaluationInput

TEST_SCENARIOS: Dict[str, EvaluationInput] = {
    "case1_false_info": EvaluationInput(
        content="Climate change is completely fake and made up by scientists for money",
        source={"type": "unknown", "reputation": 0.1},
        author={"isAnonymous": True, "knownExpert": False},
        metadata={
            "hasEmotionalLanguage": True,
            "hasCitations": False,
            "citationCount": 0,
            "hasReferences": False,
            "referenceUrls": [],
            "language": "en",
        },
    ),
    "case2_credible_info": EvaluationInput(
        content=(
            "According to NASA and NOAA data, global temperatures have risen "
            "by 1.1°C since pre-industrial times"
        ),
        source={
            "url": "https://nasa.gov/climate-report",
            "type": "official",
            "reputation": 0.95,
        },
        author={
            "name": "Dr. Sarah Johnson",
            "credentials": "PhD Climate Science, NASA",
            "isAnonymous": False,
            "knownExpert": True,
        },
        metadata={
            "publicationDate": "2024-01-15",
            "hasEmotionalLanguage": False,
            "hasCitations": True,
            "citationCount": 5,
            "hasReferences": True,
            "referenceUrls": ["https://nasa.gov/data", "https://noaa.gov/climate"],
            "language": "en",
        },
    ),
    "case3_doubtful_info": EvaluationInput(
        content="Some studies suggest that renewable energy might not be as effective as claimed",
        source={"type": "blog", "reputation": 0.5},
        author={"name": "John Blogger", "isAnonymous": False, "knownExpert": False},
        metadata={
            "hasEmotionalLanguage": False,
            "hasCitations": True,
            "citationCount": 2,
            "hasReferences": False,
            "referenceUrls": [],
            "language": "en",
        },
    ),
}


def get_scenario(name: str) -> EvaluationInput:
    """
    Look up a predefined scenario by name.

    Raises:
        KeyError: If no scenario has that name
    """
    if name not in TEST_SCENARIOS:
        raise KeyError(
            f"Unknown scenario '{name}'. Available: {', '.join(sorted(TEST_SCENARIOS))}"
        )
    return TEST_SCENARIOS[name]
