from compass.services.decision_service import DecisionService
from compass.services.option_service import OptionService
from compass.services.outcome_rule_service import OutcomeRuleService
from compass.services.rating_service import RatingService
from compass.services.scoring_service import ScoringService
from compass.services.audit import record_audit

__all__ = [
    "DecisionService",
    "OptionService",
    "OutcomeRuleService",
    "RatingService",
    "ScoringService",
    "record_audit",
]
