"""Assessment service - orchestrates the applicant-facing assessment use cases."""

from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional, Sequence
from uuid import UUID

import structlog

from creditmind.application.dto import (
    BehavioralSubmissionResponse,
    QuestionStep,
    StartSessionRequest,
    SubmitResponseRequest,
    UserFacingResult,
)
from creditmind.core.config import settings as app_settings
from creditmind.core.metrics import (
    record_assessment_decision,
    record_consistency_flag,
    track_scoring_latency,
)
from creditmind.domain.entities import (
    Assessment,
    BehavioralSignals,
    LoanRecommendation,
    QuestionGenerationContext,
    Session,
    SessionStatus,
    generate_session_seed,
    hash_ip,
    select_industry,
)
from creditmind.domain.exceptions import (
    AssessmentOverriddenException,
    BehavioralSignalsMissingException,
    InvalidBehavioralSignalsException,
    InvalidQuestionBatchException,
    InvalidResponseException,
    InvalidSessionRequestException,
    InvalidSessionTransitionException,
    NoResponsesException,
    Phase1AssessmentMissingException,
    SessionNotFoundException,
)
from creditmind.domain.interfaces import (
    AssessmentRepository,
    BehavioralSignalRepository,
    LoanRecommendationRepository,
    QuestionGeneratorClient,
    ResponseRepository,
    SessionRepository,
)
from creditmind.service.game import GameConfig, build_game_config
from creditmind.service.scoring import (
    BehavioralSignalBundle,
    CandidateQuestion,
    QuestionResponse,
    ScoringSettings,
    apply_reaction_adjustment,
    compute_behavioral_scores,
    compute_trait_variances,
    estimate_total_questions,
    is_assessment_complete,
    score_blended,
    score_phase1,
    scoring_settings,
    select_optimal_question,
)

logger = structlog.get_logger(__name__)


class AssessmentService:
    """
    Application service for the assessment flow.

    Sequences the scoring pipeline over the repositories:

        start_session -> submit_response (repeated) -> complete_phase1
        -> get_game_config -> submit_behavioral_signals -> compute_blended_score

    Each step checks the session status first, so out-of-order calls fail
    with InvalidSessionTransitionException instead of scoring stale data.
    """

    def __init__(
        self,
        session_repository: SessionRepository,
        response_repository: ResponseRepository,
        assessment_repository: AssessmentRepository,
        signal_repository: BehavioralSignalRepository,
        recommendation_repository: LoanRecommendationRepository,
        question_client: QuestionGeneratorClient,
        settings: ScoringSettings = scoring_settings,
        ip_hash_salt: Optional[str] = None,
    ):
        self._session_repo = session_repository
        self._response_repo = response_repository
        self._assessment_repo = assessment_repository
        self._signal_repo = signal_repository
        self._recommendation_repo = recommendation_repository
        self._question_client = question_client
        self._settings = settings
        self._ip_hash_salt = ip_hash_salt or app_settings.ip_hash_salt

    # =========================================================================
    # Phase 1: adaptive self-report
    # =========================================================================

    async def start_session(self, request: StartSessionRequest) -> QuestionStep:
        """
        Create a session and pick its first question.

        Raises:
            InvalidSessionRequestException: If request validation fails
            QuestionServiceException: If the question service fails
            InvalidQuestionBatchException: If the candidate batch is malformed
        """
        errors = request.validate()
        if errors:
            raise InvalidSessionRequestException("; ".join(errors))

        seed = generate_session_seed(request.user_id)
        session = Session(
            user_id=request.user_id,
            session_seed=seed,
            target_industry=select_industry(seed),
            ip_hash=hash_ip(request.ip_address, self._ip_hash_salt) if request.ip_address else None,
        )

        log = logger.bind(session_id=str(session.id), user_id=request.user_id)
        log.info("session_started", target_industry=session.target_industry)

        question = await self._select_next_question(session, [])
        await self._session_repo.save(session)

        return QuestionStep(
            session_id=str(session.id),
            question=question,
            progress=1,
            total_estimated=estimate_total_questions(
                session.current_variances, 0, self._settings
            ),
        )

    async def submit_response(self, request: SubmitResponseRequest) -> QuestionStep:
        """
        Record an answer and pick the next question, or stop.

        Variances are recomputed from the full stored history after every
        answer; the stopping rule runs on the result.

        Raises:
            InvalidResponseException: If the answer is malformed or out of order
            SessionNotFoundException: If the session doesn't exist
            InvalidSessionTransitionException: If the session is not in progress
        """
        errors = request.validate()
        if errors:
            raise InvalidResponseException("; ".join(errors))

        session = await self._get_session(request.session_id)
        session.require_status(SessionStatus.IN_PROGRESS)

        history = await self._response_repo.list_by_session(session.id)
        if request.question_index != len(history):
            raise InvalidResponseException(
                f"Expected question_index {len(history)}, got {request.question_index}"
            )

        response = apply_reaction_adjustment(
            replace(request.to_response(), session_id=str(session.id)),
            self._settings,
        )
        await self._response_repo.add(response)
        history.append(response)

        variances = compute_trait_variances(history, self._settings)
        session.current_variances = variances
        session.question_count = len(history)

        log = logger.bind(session_id=str(session.id))
        log.info(
            "response_recorded",
            question_index=response.question_index,
            trait=response.trait.value,
            score=response.score,
        )

        if is_assessment_complete(variances, len(history), settings=self._settings):
            session.current_question = None
            session.transition_to(SessionStatus.PHASE1_COMPLETE)
            await self._session_repo.save(session)
            log.info("phase1_questions_complete", question_count=len(history))
            return QuestionStep(
                session_id=str(session.id),
                question=None,
                progress=len(history),
                total_estimated=len(history),
                phase1_complete=True,
            )

        question = await self._select_next_question(session, history)
        await self._session_repo.save(session)

        return QuestionStep(
            session_id=str(session.id),
            question=question,
            progress=len(history) + 1,
            total_estimated=estimate_total_questions(variances, len(history), self._settings),
        )

    async def complete_phase1(self, session_id: str) -> UserFacingResult:
        """
        Score the self-report answers and store the Phase 1 assessment.

        Returns:
            The user-facing result. If scoring itself fails the applicant
            gets the generic pending result and the failure is logged.

        Raises:
            SessionNotFoundException: If the session doesn't exist
            InvalidSessionTransitionException: If Phase 1 was already scored
            NoResponsesException: If no answers were recorded
        """
        session = await self._get_session(session_id)
        session.require_status(SessionStatus.IN_PROGRESS, SessionStatus.PHASE1_COMPLETE)

        log = logger.bind(session_id=str(session.id))

        if await self._assessment_repo.get_by_session_id(session.id) is not None:
            raise InvalidSessionTransitionException(
                session_id=str(session.id),
                current=session.status.value,
                target=SessionStatus.PHASE1_COMPLETE.value,
            )

        responses = await self._response_repo.list_by_session(session.id)
        if not responses:
            raise NoResponsesException(str(session.id))

        try:
            with track_scoring_latency("phase1"):
                result = score_phase1(responses, self._settings)
        except ValueError as e:
            log.error("phase1_scoring_failed", error=str(e))
            return UserFacingResult.pending()

        assessment = Assessment.from_phase1(session.id, result)
        await self._assessment_repo.save(assessment)
        await self._recommendation_repo.save(
            LoanRecommendation.from_decision(assessment.id, result.decision)
        )

        if session.status == SessionStatus.IN_PROGRESS:
            session.current_question = None
            session.transition_to(SessionStatus.PHASE1_COMPLETE)
        await self._session_repo.save(session)

        record_assessment_decision("phase1", result.decision.decision.value, result.pd.pd_modified)
        log.info(
            "phase1_completed",
            assessment_id=str(assessment.id),
            pd=round(result.pd.pd_modified, 4),
            risk_rating=result.pd.risk_rating.value,
            decision=result.decision.decision.value,
            money_profile=result.profile_name,
        )

        return UserFacingResult.from_decision(result.decision, result.profile_name)

    # =========================================================================
    # Phase 2: behavioral game
    # =========================================================================

    async def get_game_config(self, session_id: str) -> GameConfig:
        """
        Build the seeded game configuration and mark Phase 2 as started.

        Raises:
            SessionNotFoundException: If the session doesn't exist
            InvalidSessionTransitionException: If Phase 1 is not complete
        """
        session = await self._get_session(session_id)
        session.require_status(SessionStatus.PHASE1_COMPLETE)

        config = build_game_config(session.session_seed)
        session.phase2_started_at = datetime.now(timezone.utc)
        await self._session_repo.save(session)

        logger.info("phase2_started", session_id=str(session.id))
        return config

    async def submit_behavioral_signals(
        self,
        session_id: str,
        payload: Mapping[str, Any],
    ) -> BehavioralSubmissionResponse:
        """
        Store gameplay telemetry and the scores extracted from it.

        Raises:
            SessionNotFoundException: If the session doesn't exist
            InvalidSessionTransitionException: If the session is not at phase1_complete
            Phase1AssessmentMissingException: If Phase 1 was never scored
            AssessmentOverriddenException: If an admin already overrode the decision
            InvalidBehavioralSignalsException: If the payload is malformed
        """
        session = await self._get_session(session_id)
        session.require_status(SessionStatus.PHASE1_COMPLETE)

        assessment = await self._assessment_repo.get_by_session_id(session.id)
        if assessment is None:
            raise Phase1AssessmentMissingException(str(session.id))

        recommendation = await self._recommendation_repo.get_by_assessment_id(assessment.id)
        if recommendation is not None and recommendation.admin_override:
            raise AssessmentOverriddenException(str(assessment.id))

        try:
            bundle = BehavioralSignalBundle.from_payload(str(session.id), payload)
        except ValueError as e:
            raise InvalidBehavioralSignalsException(str(e)) from e

        scores = compute_behavioral_scores(bundle, self._settings)
        await self._signal_repo.save(
            BehavioralSignals(
                session_id=session.id,
                bundle=bundle,
                behavioral_scores=scores.traits,
                bart_score=scores.bart_score,
            )
        )

        session.transition_to(SessionStatus.PHASE2_COMPLETE)
        await self._session_repo.save(session)

        logger.info(
            "behavioral_scored",
            session_id=str(session.id),
            bart_score=round(scores.bart_score, 3),
            deliveries=len(bundle.cargo_loads),
        )

        return BehavioralSubmissionResponse(
            session_id=str(session.id),
            status=session.status.value,
        )

    async def compute_blended_score(self, session_id: str) -> UserFacingResult:
        """
        Blend both phases and write the final decision.

        Raises:
            SessionNotFoundException: If the session doesn't exist
            InvalidSessionTransitionException: If Phase 2 is not complete
                or the session was already finalized
            Phase1AssessmentMissingException: If Phase 1 was never scored
            BehavioralSignalsMissingException: If no telemetry was stored
            AssessmentOverriddenException: If an admin already overrode the decision
        """
        session = await self._get_session(session_id)
        session.require_status(SessionStatus.PHASE2_COMPLETE)

        assessment = await self._assessment_repo.get_by_session_id(session.id)
        if assessment is None:
            raise Phase1AssessmentMissingException(str(session.id))

        signals = await self._signal_repo.get_by_session_id(session.id)
        if signals is None:
            raise BehavioralSignalsMissingException(str(session.id))

        recommendation = await self._recommendation_repo.get_by_assessment_id(assessment.id)
        if recommendation is not None and recommendation.admin_override:
            raise AssessmentOverriddenException(str(assessment.id))

        log = logger.bind(session_id=str(session.id), assessment_id=str(assessment.id))

        try:
            with track_scoring_latency("blended"):
                result = score_blended(assessment.trait_scores, signals.bundle, self._settings)
        except ValueError as e:
            log.error("blended_scoring_failed", error=str(e))
            return UserFacingResult.pending()

        assessment.apply_blended(result)
        await self._assessment_repo.save(assessment)

        if recommendation is None:
            recommendation = LoanRecommendation.from_decision(assessment.id, result.decision)
        else:
            recommendation.apply_decision(result.decision)
        await self._recommendation_repo.save(recommendation)

        session.transition_to(SessionStatus.COMPLETED)
        await self._session_repo.save(session)

        record_assessment_decision("blended", result.decision.decision.value, result.pd.pd_modified)
        record_consistency_flag(result.consistency.flag.value)
        log.info(
            "blended_score_computed",
            pd=round(result.pd.pd_modified, 4),
            risk_rating=result.pd.risk_rating.value,
            consistency=round(result.consistency.overall, 3),
            consistency_flag=result.consistency.flag.value,
            decision=result.decision.decision.value,
            money_profile=result.profile_name,
        )

        return UserFacingResult.from_decision(result.decision, result.profile_name)

    async def abandon_session(self, session_id: str) -> Session:
        """
        Mark an unfinished session as abandoned.

        Raises:
            InvalidSessionTransitionException: If the session already finished
        """
        session = await self._get_session(session_id)
        session.transition_to(SessionStatus.ABANDONED)
        await self._session_repo.save(session)
        logger.info("session_abandoned", session_id=str(session.id))
        return session

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _get_session(self, session_id: str) -> Session:
        try:
            key = UUID(str(session_id))
        except ValueError:
            raise SessionNotFoundException(str(session_id)) from None

        session = await self._session_repo.get_by_id(key)
        if session is None:
            raise SessionNotFoundException(str(session_id))
        return session

    async def _select_next_question(
        self,
        session: Session,
        history: Sequence[QuestionResponse],
    ) -> CandidateQuestion:
        """Fetch a candidate batch and keep the most informative question."""
        context = QuestionGenerationContext.from_history(
            session_seed=session.session_seed,
            target_industry=session.target_industry,
            variances=session.current_variances,
            responses=history,
            previous_scenarios=session.previous_scenarios,
            candidate_count=self._settings.candidates_per_batch,
        )
        candidates: List[CandidateQuestion] = await self._question_client.generate_candidates(context)

        try:
            index = select_optimal_question(
                candidates,
                session.current_variances,
                [r.question_type for r in history],
                self._settings,
            )
        except ValueError as e:
            raise InvalidQuestionBatchException(str(e)) from e

        question = candidates[index]
        session.current_question = question
        if question.scenario_theme:
            session.previous_scenarios = [*session.previous_scenarios, question.scenario_theme]

        logger.debug(
            "question_selected",
            session_id=str(session.id),
            trait=question.trait.value,
            question_type=question.question_type.value,
            candidates=len(candidates),
        )
        return question
