# src/cies/credibility/sources.py

from typing import Dict

from cies.credibility.schema import SourceType

# Source-type adjustments: points added to (reputation x 100)
# Positive = more trustworthy than reputation alone suggests
SOURCE_TYPE_ADJUSTMENTS: Dict[str, int] = {
    SourceType.OFFICIAL.value: 20,  # Government / institutional publishers
    SourceType.NEWS.value: 10,  # Edited news outlets
    SourceType.BLOG.value: 0,  # Personal or expert blogs, no editorial review
    SourceType.SOCIAL.value: -20,  # Social media posts, prone to misinformation
    SourceType.UNKNOWN.value: -30,  # Unattributed origin
}


def update_source_adjustment(source_type: str, points: int) -> None:
    """
    Update the score adjustment for a source type at runtime.

    Args:
        source_type: Source type value (e.g., "news")
        points: New adjustment (-100 to 100)

    Raises:
        ValueError: If points is out of range
    """
    if not (-100 <= points <= 100):
        raise ValueError("Source adjustment must be between -100 and 100")
    SOURCE_TYPE_ADJUSTMENTS[str(getattr(source_type, "value", source_type))] = points


def get_source_adjustment(source_type: str, default: int = 0) -> int:
    """
    Get the score adjustment for a source type.

    Args:
        source_type: Source type value or SourceType member
        default: Adjustment if the type is not registered

    Returns:
        Points to add to the reputation-based source score.
    """
    return SOURCE_TYPE_ADJUSTMENTS.get(
        str(getattr(source_type, "value", source_type)), default
    )
