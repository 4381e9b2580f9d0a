"""Effective scoring weights: base distribution plus learned deltas, normalised."""

from typing import Any, Dict, List, Mapping

MIN_WEIGHT = 0.1
MAX_RECOMMENDED_WEIGHT = 50.0


def normalize_weights(weights: Mapping[str, float]) -> Dict[str, float]:
    """
    Scale weights proportionally so they sum to 100.

    Weights already summing to 100 (within 0.01) are returned unchanged.
    All-zero input is returned unchanged.
    """
    total = sum(weights.values())
    if abs(total - 100) < 0.01 or total <= 0:
        return dict(weights)
    return {category: (weight / total) * 100 for category, weight in weights.items()}


def compute_active_weights(
    base_weights: Mapping[str, float], deltas: Mapping[str, float]
) -> Dict[str, float]:
    """
    Apply learned deltas to base weights and normalise.

    Adjusted weights never drop below MIN_WEIGHT for categories that had a
    positive base weight. Categories with a zero base weight stay at zero
    unless a positive delta lifts them.
    """
    adjusted = {}
    for category, base in base_weights.items():
        value = base + deltas.get(category, 0.0)
        floor = MIN_WEIGHT if base > 0 else 0.0
        adjusted[category] = max(floor, value)
    return normalize_weights(adjusted)


def validate_weights(weights: Mapping[str, float]) -> Dict[str, Any]:
    """
    Check that weights are reasonable.

    Returns:
        {"is_valid": bool, "issues": [str, ...]}
    """
    issues: List[str] = []

    total = sum(weights.values())
    if abs(total - 100) > 0.01:
        issues.append(f"Total weight is {total:.2f}%, expected 100%")

    for category, weight in weights.items():
        if weight < 0:
            issues.append(f"Category {category} has negative weight: {weight}%")
        if weight > MAX_RECOMMENDED_WEIGHT:
            issues.append(f"Category {category} has very high weight: {weight}%")

    return {"is_valid": len(issues) == 0, "issues": issues}
