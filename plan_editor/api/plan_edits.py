"""Plan edit API endpoints.

Resolve date phrases, preview patch sets, and commit or discard previews.
Typed outcomes map onto status codes: 404 not found, 409 conflict,
410 expired, 422 rejection or unrecognized phrase.
"""

from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Response, status
from loguru import logger

from plan_editor.api.schemas import CommitRequest, ProposeRequest, ResolveRequest
from plan_editor.dates.types import Ambiguity, DateRange, ResolvedTarget, UnrecognizedPhrase
from plan_editor.plans.commit.types import CommitResult
from plan_editor.plans.errors import ScheduleNotFoundError
from plan_editor.plans.modify.types import RejectionReport
from plan_editor.plans.outcomes import ConflictError, ExpiredError, NotFoundError
from plan_editor.plans.proposals.types import PatchProposal
from plan_editor.plans.revision.types import PlanRevision
from plan_editor.plans.types import CanonicalSchedule
from plan_editor.services.plan_edit_service import PlanEditService, build_default_service

router = APIRouter(prefix="/plans", tags=["plan-edits"])

_OUTCOME_STATUS = {
    "not_found": status.HTTP_404_NOT_FOUND,
    "conflict": status.HTTP_409_CONFLICT,
    "expired": status.HTTP_410_GONE,
}


def get_plan_edit_service() -> PlanEditService:
    return build_default_service()


def _raise_outcome(outcome: NotFoundError | ExpiredError | ConflictError) -> NoReturn:
    raise HTTPException(status_code=_OUTCOME_STATUS[outcome.kind], detail=outcome.model_dump(mode="json"))


def _schedule_not_found(e: ScheduleNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/resolve")
async def resolve_phrase(
    request: ResolveRequest,
    service: PlanEditService = Depends(get_plan_edit_service),
) -> ResolvedTarget | Ambiguity:
    """Resolve a reference phrase to a date or a clarification question.

    Raises:
        HTTPException: 422 if the phrase is not understood, 404 if plan_id is unknown
    """
    try:
        result = service.resolve_phrase(request.phrase, plan_id=request.plan_id, today=request.today)
    except ScheduleNotFoundError as e:
        raise _schedule_not_found(e) from e

    if isinstance(result, UnrecognizedPhrase):
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=result.model_dump(mode="json"))
    return result


@router.post("/resolve-range")
async def resolve_range(
    request: ResolveRequest,
    service: PlanEditService = Depends(get_plan_edit_service),
) -> DateRange:
    """Resolve a multi-day phrase ("this weekend", "next 3 days")."""
    try:
        result = service.resolve_range(request.phrase, plan_id=request.plan_id, today=request.today)
    except ScheduleNotFoundError as e:
        raise _schedule_not_found(e) from e

    if isinstance(result, UnrecognizedPhrase):
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=result.model_dump(mode="json"))
    return result


@router.get("/proposals/{proposal_id}")
async def get_proposal(
    proposal_id: str,
    service: PlanEditService = Depends(get_plan_edit_service),
) -> PatchProposal:
    result = service.get_proposal(proposal_id)
    if isinstance(result, (NotFoundError, ExpiredError)):
        _raise_outcome(result)
    return result


@router.delete("/proposals/{proposal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def discard_proposal(
    proposal_id: str,
    service: PlanEditService = Depends(get_plan_edit_service),
) -> Response:
    if not service.discard_proposal(proposal_id):
        _raise_outcome(NotFoundError(proposal_id=proposal_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/proposals/{proposal_id}/commit")
async def commit_proposal(
    proposal_id: str,
    request: CommitRequest,
    service: PlanEditService = Depends(get_plan_edit_service),
) -> CommitResult:
    """Commit a previewed proposal.

    Raises:
        HTTPException: 404 unknown or used proposal, 409 version conflict,
            410 expired preview, 500 unexpected failure
    """
    logger.info("Commit requested", proposal_id=proposal_id, submitted_version=request.submitted_version)
    try:
        result = service.commit(proposal_id, request.submitted_version)
    except ScheduleNotFoundError as e:
        raise _schedule_not_found(e) from e
    except Exception as e:
        logger.exception("Failed to commit proposal", proposal_id=proposal_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to commit proposal",
        ) from e

    if isinstance(result, (NotFoundError, ExpiredError, ConflictError)):
        _raise_outcome(result)
    return result


@router.get("/{plan_id}")
async def get_schedule(
    plan_id: str,
    service: PlanEditService = Depends(get_plan_edit_service),
) -> CanonicalSchedule:
    try:
        return service.get_schedule(plan_id)
    except ScheduleNotFoundError as e:
        raise _schedule_not_found(e) from e


@router.get("/{plan_id}/revisions")
async def list_revisions(
    plan_id: str,
    service: PlanEditService = Depends(get_plan_edit_service),
) -> list[PlanRevision]:
    return service.list_revisions(plan_id)


@router.post("/{plan_id}/proposals", status_code=status.HTTP_201_CREATED)
async def create_proposal(
    plan_id: str,
    request: ProposeRequest,
    service: PlanEditService = Depends(get_plan_edit_service),
) -> PatchProposal:
    """Validate a patch set and store it as a time-boxed preview.

    Raises:
        HTTPException: 422 with every violation if the set is rejected,
            404 if the plan does not exist
    """
    try:
        result = service.propose(plan_id, request.patches)
    except ScheduleNotFoundError as e:
        raise _schedule_not_found(e) from e
    except Exception as e:
        logger.exception("Failed to create proposal", plan_id=plan_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create proposal",
        ) from e

    if isinstance(result, RejectionReport):
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=result.model_dump(mode="json"))
    return result
