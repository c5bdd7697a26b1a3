"""
Product recommendations over an in-memory catalog snapshot.

Four candidate generators feed one ranked list:
1. Similar products: share category, subcategory or a tag with the product being viewed
2. Purchase history: match categories/tags of products the shopper bought
3. Popular products: rating >= 4.0 with at least 5 reviews
4. Recently viewed: match categories/tags of the last 5 viewed products

Candidates are de-duplicated (first generator wins), sorted by score and
truncated. Similarity scores are capped at 1.0.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from storefront.catalog.models import ProductRecord
from storefront.utils.logger import get_logger

logger = get_logger("recommendation.scoring")

POPULAR_MIN_RATING = 4.0
POPULAR_MIN_REVIEWS = 5
RECENT_VIEW_WINDOW = 5


@dataclass(frozen=True)
class Recommendation:
    product: ProductRecord
    score: float
    reason: str

    def to_dict(self) -> Dict[str, object]:
        return {"product": self.product.to_dict(), "score": round(self.score, 4), "reason": self.reason}


def _tag_overlap(tags: Iterable[str], reference: Set[str]) -> float:
    """Fraction of ``reference`` tags present in ``tags`` (0 when reference is empty)."""
    if not reference:
        return 0.0
    return len([t for t in tags if t in reference]) / len(reference)


def category_score(product: ProductRecord, reference: ProductRecord) -> float:
    score = 0.0
    if product.category == reference.category:
        score += 0.4
    if product.subcategory == reference.subcategory:
        score += 0.3
    score += _tag_overlap(product.tags, set(reference.tags)) * 0.3
    return min(score, 1.0)


def preference_score(product: ProductRecord, categories: Set[str], tags: Set[str]) -> float:
    score = 0.0
    if product.category in categories:
        score += 0.4
    if product.subcategory in categories:
        score += 0.3
    score += _tag_overlap(product.tags, tags) * 0.3
    return min(score, 1.0)


def popularity_score(product: ProductRecord) -> float:
    """0.7 × normalized rating + 0.3 × log-scaled review count."""
    normalized_rating = (product.rating or 0) / 5
    normalized_reviews = math.log10((product.review_count or 0) + 1) / 3
    return normalized_rating * 0.7 + normalized_reviews * 0.3


def recent_view_score(product: ProductRecord, categories: Set[str], tags: Set[str]) -> float:
    score = 0.0
    if product.category in categories:
        score += 0.5
    if product.subcategory in categories:
        score += 0.3
    score += _tag_overlap(product.tags, tags) * 0.2
    return min(score, 1.0)


def _profile(products: Iterable[ProductRecord]) -> Tuple[Set[str], Set[str]]:
    """Categories (incl. subcategories) and tags of a set of products."""
    categories: Set[str] = set()
    tags: Set[str] = set()
    for p in products:
        categories.add(p.category)
        if p.subcategory:
            categories.add(p.subcategory)
        tags.update(p.tags)
    return categories, tags


def _matches_profile(product: ProductRecord, categories: Set[str], tags: Set[str]) -> bool:
    return product.category in categories or any(t in tags for t in product.tags)


def similar_products(products: Sequence[ProductRecord], reference: ProductRecord, limit: int = 4) -> List[Recommendation]:
    ref_tags = set(reference.tags)
    candidates = [
        p for p in products
        if p.id != reference.id and (
            p.category == reference.category
            or p.subcategory == reference.subcategory
            or any(t in ref_tags for t in p.tags)
        )
    ][:limit * 2]
    return [
        Recommendation(p, category_score(p, reference), f"Similar to {reference.category} items")
        for p in candidates
    ]


def history_based(products: Sequence[ProductRecord], purchased: Sequence[ProductRecord], limit: int = 4) -> List[Recommendation]:
    if not purchased:
        return []
    categories, tags = _profile(purchased)
    bought = {p.id for p in purchased}
    candidates = [
        p for p in products
        if p.id not in bought and _matches_profile(p, categories, tags)
    ][:limit * 2]
    return [Recommendation(p, preference_score(p, categories, tags), "Based on your preferences") for p in candidates]


def popular_products(products: Sequence[ProductRecord], limit: int = 4) -> List[Recommendation]:
    popular = [
        p for p in products
        if p.rating >= POPULAR_MIN_RATING and p.review_count >= POPULAR_MIN_REVIEWS
    ]
    popular.sort(key=lambda p: (p.rating, p.review_count), reverse=True)
    return [Recommendation(p, popularity_score(p), "Popular choice") for p in popular[:limit]]


def recently_viewed_based(products: Sequence[ProductRecord], viewed: Sequence[ProductRecord], limit: int = 4) -> List[Recommendation]:
    """``viewed`` is most-recent first; only the last few views shape the profile."""
    recent = list(viewed)[:RECENT_VIEW_WINDOW]
    if not recent:
        return []
    categories, tags = _profile(recent)
    seen = {p.id for p in recent}
    candidates = [
        p for p in products
        if p.id not in seen and _matches_profile(p, categories, tags)
    ][:limit]
    return [Recommendation(p, recent_view_score(p, categories, tags), "Based on your recent views") for p in candidates]


def deduplicate(recommendations: Iterable[Recommendation]) -> List[Recommendation]:
    seen: Set[str] = set()
    unique = []
    for rec in recommendations:
        if rec.product.id not in seen:
            seen.add(rec.product.id)
            unique.append(rec)
    return unique


def recommend(
    products: Sequence[ProductRecord],
    product_id: Optional[str] = None,
    purchased_ids: Sequence[str] = (),
    viewed_ids: Sequence[str] = (),
    limit: int = 8,
) -> List[Recommendation]:
    """
    Ranked recommendations for a shopper.

    Args:
        products: Full catalog snapshot
        product_id: Product currently being viewed (enables similar-product candidates)
        purchased_ids: Ids of previously purchased products
        viewed_ids: Ids of recently viewed products, most recent first
        limit: Maximum number of recommendations

    Returns:
        Recommendations sorted by score (ties keep generator order)
    """
    by_id = {p.id: p for p in products}
    recommendations: List[Recommendation] = []

    if product_id and product_id in by_id:
        recommendations.extend(similar_products(products, by_id[product_id], limit))

    purchased = [by_id[i] for i in purchased_ids if i in by_id]
    recommendations.extend(history_based(products, purchased, limit))

    recommendations.extend(popular_products(products, limit))

    viewed = [by_id[i] for i in viewed_ids if i in by_id]
    recommendations.extend(recently_viewed_based(products, viewed, limit))

    # The product being viewed can still arrive through the popular list
    unique = [r for r in deduplicate(recommendations) if r.product.id != product_id]
    unique.sort(key=lambda r: r.score, reverse=True)
    logger.debug("recommend(product_id=%s): %d candidates, returning %d", product_id, len(unique), min(limit, len(unique)))
    return unique[:limit]
