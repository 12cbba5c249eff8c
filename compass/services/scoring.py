"""Weighted-sum scoring of a decision's alternatives.

``calculate`` is a pure function over plain attribute-bearing objects (ORM rows
or anything duck-typed like them):

* alternatives: ``id``, ``name``
* criteria: ``id``, ``weight`` (``None`` counts as 1)
* ratings: ``alternative_id``, ``criterion_id``, ``value``

Each alternative's score is the weight-normalised mean of its ratings, rounded
half-up to two decimal places. A missing rating contributes 0. When every
criterion weighs 0 the divisor falls back to 1, so all scores come out as 0.
"""
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Sequence
from uuid import UUID

DEFAULT_WEIGHT = Decimal("1")
SCORE_QUANTUM = Decimal("0.01")
ZERO = Decimal("0")


@dataclass(frozen=True)
class AlternativeScore:
    alternative_id: UUID
    name: str
    score: Decimal


@dataclass(frozen=True)
class ScoreResult:
    alternatives: list[AlternativeScore] = field(default_factory=list)
    overall: Decimal = ZERO

    def score_for(self, alternative_id: UUID) -> Decimal:
        for item in self.alternatives:
            if item.alternative_id == alternative_id:
                return item.score
        raise KeyError(alternative_id)


def _as_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps 0.1 as 0.1 instead of its binary expansion
    return Decimal(str(value))


def criterion_weight(criterion: Any) -> Decimal:
    weight = getattr(criterion, "weight", None)
    return DEFAULT_WEIGHT if weight is None else _as_decimal(weight)


def round_score(value: Decimal) -> Decimal:
    return value.quantize(SCORE_QUANTUM, rounding=ROUND_HALF_UP)


def calculate(
    alternatives: Sequence[Any],
    criteria: Sequence[Any],
    ratings: Iterable[Any],
) -> ScoreResult:
    """Score and rank ``alternatives``; highest score first, ``overall`` is the top score."""
    weights = [(criterion.id, criterion_weight(criterion)) for criterion in criteria]
    total_weight = sum((weight for _, weight in weights), ZERO)
    effective_total_weight = total_weight if total_weight > 0 else DEFAULT_WEIGHT

    values: dict[tuple[UUID, UUID], Decimal] = {
        (rating.alternative_id, rating.criterion_id): _as_decimal(rating.value) for rating in ratings
    }

    scored: list[AlternativeScore] = []
    for alternative in alternatives:
        weighted_sum = sum(
            (values.get((alternative.id, criterion_id), ZERO) * weight for criterion_id, weight in weights),
            ZERO,
        )
        scored.append(
            AlternativeScore(
                alternative_id=alternative.id,
                name=alternative.name,
                score=round_score(weighted_sum / effective_total_weight),
            )
        )

    ranked = sorted(scored, key=lambda item: item.score, reverse=True)
    overall = ranked[0].score if ranked else ZERO
    return ScoreResult(alternatives=ranked, overall=overall)
