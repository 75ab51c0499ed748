"""
Scoring Module for the CreditMind assessment pipeline
"""

from .models import (
    Trait,
    TRAIT_ORDER,
    TraitScores,
    NormalizedTraitScores,
    TraitVariances,
    QuestionType,
    CandidateQuestion,
    QuestionResponse,
    BehavioralSignalBundle,
    BehavioralScores,
    ConsistencyFlag,
    ConsistencyIndex,
    RiskRating,
    PDResult,
    MoneyProfile,
    ProfileMatch,
    AssessmentDecision,
    UserFacingDecision,
    RecommendationDecision,
    LoanTerms,
    LoanDecisionResult,
)
from .settings import ScoringSettings, scoring_settings
from .traits import (
    normalize_score,
    denormalize_score,
    compute_trait_averages,
    compute_trait_variances,
    select_highest_variance_trait,
    summarize_responses,
)
from .selection import (
    select_optimal_question,
    is_assessment_complete,
    estimate_total_questions,
)
from .reaction import adjust_reaction_score, apply_reaction_adjustment
from .behavioral import compute_behavioral_scores, compute_bart_score
from .blending import blend_scores, compute_consistency_index, get_consistency_flag
from .pd import calculate_full_pd, get_risk_rating
from .profiles import MONEY_PROFILES, match_money_profile, generate_blended_profile_name
from .loan import determine_loan_decision, explain_decision
from .pipeline import Phase1Result, BlendedResult, score_phase1, score_blended

__all__ = [
    # Settings
    "ScoringSettings",
    "scoring_settings",
    # Models
    "Trait",
    "TRAIT_ORDER",
    "TraitScores",
    "NormalizedTraitScores",
    "TraitVariances",
    "QuestionType",
    "CandidateQuestion",
    "QuestionResponse",
    "BehavioralSignalBundle",
    "BehavioralScores",
    "ConsistencyFlag",
    "ConsistencyIndex",
    "RiskRating",
    "PDResult",
    "MoneyProfile",
    "ProfileMatch",
    "AssessmentDecision",
    "UserFacingDecision",
    "RecommendationDecision",
    "LoanTerms",
    "LoanDecisionResult",
    # Trait Aggregation
    "normalize_score",
    "denormalize_score",
    "compute_trait_averages",
    "compute_trait_variances",
    "select_highest_variance_trait",
    "summarize_responses",
    # Question Selection
    "select_optimal_question",
    "is_assessment_complete",
    "estimate_total_questions",
    "adjust_reaction_score",
    "apply_reaction_adjustment",
    # Behavioral
    "compute_behavioral_scores",
    "compute_bart_score",
    # Blending
    "blend_scores",
    "compute_consistency_index",
    "get_consistency_flag",
    # Risk Model
    "calculate_full_pd",
    "get_risk_rating",
    # Profiles
    "MONEY_PROFILES",
    "match_money_profile",
    "generate_blended_profile_name",
    # Loan Decision
    "determine_loan_decision",
    "explain_decision",
    # Pipeline
    "Phase1Result",
    "BlendedResult",
    "score_phase1",
    "score_blended",
]
