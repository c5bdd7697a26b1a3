"""
Product recommendations scored over the in-memory catalog.
"""
from storefront.recommendation.scoring import Recommendation, recommend

__all__ = [
    "Recommendation",
    "recommend",
]
