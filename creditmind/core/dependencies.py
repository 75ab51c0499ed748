"""Service wiring and process lifecycle."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from creditmind import __version__
from creditmind.application.services import AdminService, AssessmentService
from creditmind.core.logging import setup_logging
from creditmind.domain.interfaces import QuestionGeneratorClient
from creditmind.infrastructure.clients import HttpQuestionGeneratorClient
from creditmind.infrastructure.database import DatabaseSessionManager, db_manager
from creditmind.infrastructure.repositories import (
    PostgresAssessmentRepository,
    PostgresBehavioralSignalRepository,
    PostgresLoanRecommendationRepository,
    PostgresResponseRepository,
    PostgresSessionRepository,
)


def get_question_client() -> HttpQuestionGeneratorClient:
    """Get a QuestionGeneratorClient instance."""
    return HttpQuestionGeneratorClient()


def get_assessment_service(
    session: AsyncSession,
    question_client: QuestionGeneratorClient | None = None,
) -> AssessmentService:
    """Get an AssessmentService bound to one database session."""
    return AssessmentService(
        session_repository=PostgresSessionRepository(session),
        response_repository=PostgresResponseRepository(session),
        assessment_repository=PostgresAssessmentRepository(session),
        signal_repository=PostgresBehavioralSignalRepository(session),
        recommendation_repository=PostgresLoanRecommendationRepository(session),
        question_client=question_client or get_question_client(),
    )


def get_admin_service(session: AsyncSession) -> AdminService:
    """Get an AdminService bound to one database session."""
    return AdminService(
        session_repository=PostgresSessionRepository(session),
        response_repository=PostgresResponseRepository(session),
        assessment_repository=PostgresAssessmentRepository(session),
        signal_repository=PostgresBehavioralSignalRepository(session),
        recommendation_repository=PostgresLoanRecommendationRepository(session),
    )


@asynccontextmanager
async def lifespan(
    database_url: str | None = None,
    create_tables: bool = False,
    manager: DatabaseSessionManager = db_manager,
) -> AsyncGenerator[DatabaseSessionManager, None]:
    """
    Process lifespan manager.

    Handles startup and shutdown:
    - Set up logging
    - Initialize the database engine (and tables, when asked)
    - Dispose of the engine on shutdown
    """
    setup_logging()
    manager.init(database_url)
    if create_tables:
        await manager.create_all()

    logger = structlog.get_logger(__name__)
    logger.info("application_started", version=__version__)

    try:
        yield manager
    finally:
        await manager.close()
        logger.info("application_stopped")


@asynccontextmanager
async def assessment_scope(
    manager: DatabaseSessionManager = db_manager,
    question_client: QuestionGeneratorClient | None = None,
) -> AsyncGenerator[AssessmentService, None]:
    """One transaction around an AssessmentService call sequence."""
    async with manager.session() as session:
        yield get_assessment_service(session, question_client)


@asynccontextmanager
async def admin_scope(
    manager: DatabaseSessionManager = db_manager,
) -> AsyncGenerator[AdminService, None]:
    """One transaction around an AdminService call sequence."""
    async with manager.session() as session:
        yield get_admin_service(session)
