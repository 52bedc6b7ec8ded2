"""Engine package - Cross-facet reasoning over analyzer output."""

from qkview_doctor.engine.recommendations import (
    RecommendationEngine,
    deduplicate_recommendations,
    sort_by_priority,
)

__all__ = ["RecommendationEngine", "deduplicate_recommendations", "sort_by_priority"]
