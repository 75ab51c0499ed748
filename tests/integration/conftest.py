"""
Fixtures for integration tests.

Provides:
- In-memory database for testing
- Mock question generator client with deterministic candidate batches
- Assessment and admin services wired to the SQL repositories
- Telemetry payloads for the Phase 2 game
"""

from typing import AsyncGenerator, List

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from creditmind.application.dto import StartSessionRequest, SubmitResponseRequest
from creditmind.application.services import AdminService, AssessmentService
from creditmind.domain.entities import QuestionGenerationContext
from creditmind.domain.exceptions import QuestionServiceException
from creditmind.domain.interfaces import QuestionGeneratorClient
from creditmind.infrastructure.database import Base
from creditmind.infrastructure.repositories import (
    PostgresAssessmentRepository,
    PostgresBehavioralSignalRepository,
    PostgresLoanRecommendationRepository,
    PostgresResponseRepository,
    PostgresSessionRepository,
)
from creditmind.service.scoring.models import (
    CandidateQuestion,
    QuestionOption,
    QuestionType,
    Trait,
)


# =============================================================================
# Mock Clients
# =============================================================================

ROTATING_TYPES = [
    QuestionType.GRID,
    QuestionType.BARS,
    QuestionType.BUDGET,
    QuestionType.TIMELINE,
    QuestionType.TRADEOFF,
]


class MockQuestionGeneratorClient(QuestionGeneratorClient):
    """Mock generator that targets the three least-measured traits."""

    def __init__(self, fail_mode: bool = False, empty_batches: bool = False):
        self.fail_mode = fail_mode
        self.empty_batches = empty_batches
        self.call_count = 0
        self.contexts: List[QuestionGenerationContext] = []

    async def generate_candidates(
        self,
        context: QuestionGenerationContext,
    ) -> List[CandidateQuestion]:
        """Return three candidates or raise based on mode."""
        self.call_count += 1
        self.contexts.append(context)

        if self.fail_mode:
            raise QuestionServiceException(
                message="Question service unavailable",
                status_code=503,
            )
        if self.empty_batches:
            return []

        candidates = []
        for offset, trait in enumerate(context.trait_priority()[:3]):
            question_type = ROTATING_TYPES[(context.question_count + offset) % len(ROTATING_TYPES)]
            candidates.append(
                CandidateQuestion(
                    question_id=f"q{context.question_count}-{offset}",
                    question_type=question_type,
                    trait=trait,
                    options=(
                        QuestionOption(label="low", score=1.0, trait=trait),
                        QuestionOption(label="mid", score=3.0, trait=trait),
                        QuestionOption(label="high", score=5.0, trait=trait),
                    ),
                    scenario_theme=f"{context.target_industry} scene {context.question_count}",
                )
            )
        return candidates


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """Create an in-memory SQLite async engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def test_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with async_session() as session:
        yield session


# =============================================================================
# Mock Client Fixtures
# =============================================================================

@pytest.fixture
def mock_question_client() -> MockQuestionGeneratorClient:
    """Create a mock question generator."""
    return MockQuestionGeneratorClient()


@pytest.fixture
def failing_question_client() -> MockQuestionGeneratorClient:
    """Create a question generator that always fails."""
    return MockQuestionGeneratorClient(fail_mode=True)


# =============================================================================
# Service Fixtures
# =============================================================================

def build_assessment_service(
    session: AsyncSession,
    question_client: QuestionGeneratorClient,
) -> AssessmentService:
    return AssessmentService(
        session_repository=PostgresSessionRepository(session),
        response_repository=PostgresResponseRepository(session),
        assessment_repository=PostgresAssessmentRepository(session),
        signal_repository=PostgresBehavioralSignalRepository(session),
        recommendation_repository=PostgresLoanRecommendationRepository(session),
        question_client=question_client,
        ip_hash_salt="test-salt",
    )


@pytest.fixture
def assessment_service(
    test_session: AsyncSession,
    mock_question_client: MockQuestionGeneratorClient,
) -> AssessmentService:
    """
    Create an assessment service with mocked dependencies.

    This service:
    - Uses an in-memory SQLite database
    - Mocks the question generator with deterministic batches
    """
    return build_assessment_service(test_session, mock_question_client)


@pytest.fixture
def assessment_service_with_failing_generator(
    test_session: AsyncSession,
    failing_question_client: MockQuestionGeneratorClient,
) -> AssessmentService:
    """Create an assessment service whose question generator always fails."""
    return build_assessment_service(test_session, failing_question_client)


@pytest.fixture
def assessment_service_with_empty_batches(test_session: AsyncSession) -> AssessmentService:
    """Create an assessment service whose question generator returns no candidates."""
    return build_assessment_service(test_session, MockQuestionGeneratorClient(empty_batches=True))


@pytest.fixture
def admin_service(test_session: AsyncSession) -> AdminService:
    """Create an admin service over the same database."""
    return AdminService(
        session_repository=PostgresSessionRepository(test_session),
        response_repository=PostgresResponseRepository(test_session),
        assessment_repository=PostgresAssessmentRepository(test_session),
        signal_repository=PostgresBehavioralSignalRepository(test_session),
        recommendation_repository=PostgresLoanRecommendationRepository(test_session),
    )


# =============================================================================
# Helper Fixtures
# =============================================================================

STABLE_ANSWERS = {
    Trait.OPENNESS: 3.0,
    Trait.CONSCIENTIOUSNESS: 5.0,
    Trait.EXTRAVERSION: 3.0,
    Trait.AGREEABLENESS: 3.0,
    Trait.NEUROTICISM: 1.0,
}


async def answer_until_phase1_complete(
    service: AssessmentService,
    user_id: str = "user_stable",
    answers: dict = None,
) -> str:
    """
    Run Phase 1 to its stopping point, answering each trait consistently.

    Returns:
        The session id
    """
    answers = answers or STABLE_ANSWERS
    step = await service.start_session(
        StartSessionRequest(user_id=user_id, ip_address="198.51.100.4")
    )

    index = 0
    while not step.phase1_complete:
        question = step.question
        step = await service.submit_response(
            SubmitResponseRequest(
                session_id=step.session_id,
                question_index=index,
                question_type=question.question_type.value,
                trait=question.trait.value,
                score=answers[question.trait],
                response_time_ms=1500,
            )
        )
        index += 1

    return step.session_id


@pytest.fixture
def careful_game_payload() -> dict:
    """Telemetry of a deliberate, regular, cooperative player."""
    return {
        "game_seed": "abc123",
        "duration_ms": 60000,
        "tap_intervals": [600, 650, 620, 610, 640],
        "path_records": [
            {"actual_dist": 10, "optimal_dist": 10, "delivery_id": 1},
            {"actual_dist": 12, "optimal_dist": 11, "delivery_id": 2},
        ],
        "banking_events": [
            {"timestamp_ms": 10000, "amount": 50},
            {"timestamp_ms": 20000, "amount": 50},
            {"timestamp_ms": 30000, "amount": 50},
        ],
        "cargo_loads": [
            {"crates": 2, "tipped": False, "reward": 20, "delivery_id": 1},
            {"crates": 3, "tipped": False, "reward": 30, "delivery_id": 2},
        ],
        "loss_events": [
            {"type": "theft", "timestamp_ms": 18000, "amount_lost": 15, "behavior_delta": 0.1},
        ],
        "sharing_events": [
            {"offered": True, "accepted": True, "reward_split": 0.5},
        ],
        "exploration_tiles": 60,
        "total_tiles": 300,
        "crowd_time_ms": 20000,
        "quiet_time_ms": 40000,
        "multi_order_counts": [1, 2, 1],
    }


@pytest.fixture
def run_phase1():
    """Async helper that answers Phase 1 up to the stopping rule."""
    return answer_until_phase1_complete
