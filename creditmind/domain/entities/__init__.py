"""Domain Entities - Core business objects."""

from .session import (
    INDUSTRIES,
    Session,
    SessionStatus,
    generate_session_seed,
    hash_ip,
    select_industry,
)
from .assessment import Assessment
from .loan import LoanRecommendation
from .signals import BehavioralSignals
from .question import QuestionGenerationContext

__all__ = [
    "INDUSTRIES",
    "Session",
    "SessionStatus",
    "generate_session_seed",
    "hash_ip",
    "select_industry",
    "Assessment",
    "LoanRecommendation",
    "BehavioralSignals",
    "QuestionGenerationContext",
]
