from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, List

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from golfsg.api.security import require_api_key
from golfsg.courses.schemas import CourseLayout
from golfsg.courses.store import get_course_layout, list_course_ids
from golfsg.rounds.models import RoundSession, RoundSummary, TrendData
from golfsg.rounds.pipeline import process_round, summarize
from golfsg.rounds.service import RoundNotFound, RoundService, get_round_service
from golfsg.rounds.summary import TrendsCalculator
from golfsg.sg.derive import VideoSessionTimebase
from golfsg.sg.overrides import apply_override
from golfsg.sg.schemas import LocationSample, ShotEvent

router = APIRouter(
    prefix="/api/sg", tags=["strokes-gained"], dependencies=[Depends(require_api_key)]
)

logger = logging.getLogger(__name__)

ROUND_ID_PATTERN = r"^[A-Za-z0-9_-]+$"


class CreateRoundRequest(BaseModel):
    round_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("round_id", "roundId"),
        serialization_alias="roundId",
        pattern=ROUND_ID_PATTERN,
    )
    course_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("course_id", "courseId"),
        serialization_alias="courseId",
    )
    course: CourseLayout | None = None
    course_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("course_name", "courseName"),
        serialization_alias="courseName",
    )
    session_start: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("session_start", "sessionStart"),
        serialization_alias="sessionStart",
    )
    video_start_offset: float = Field(
        default=0.0,
        validation_alias=AliasChoices("video_start_offset", "videoStartOffset"),
        serialization_alias="videoStartOffset",
    )
    events: List[ShotEvent] = Field(default_factory=list)
    samples: List[LocationSample] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class ShotOverrideRequest(BaseModel):
    field: str
    value: Any = None


def _resolve_layout(body: CreateRoundRequest) -> CourseLayout | None:
    if body.course is not None:
        return body.course
    if body.course_id is None:
        return None
    layout = get_course_layout(body.course_id)
    if layout is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="course_not_found"
        )
    return layout


def _load_session(service: RoundService, round_id: str) -> RoundSession:
    try:
        return service.load(round_id)
    except (RoundNotFound, ValueError):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="round_not_found"
        )


@router.get("/courses", response_model=List[str])
def list_courses() -> List[str]:
    return list_course_ids()


@router.post("/rounds", response_model=RoundSession)
def create_round(
    body: CreateRoundRequest,
    service: RoundService = Depends(get_round_service),
) -> RoundSession:
    layout = _resolve_layout(body)
    timebase = (
        VideoSessionTimebase(body.session_start, body.video_start_offset)
        if body.session_start is not None
        else None
    )
    round_id = body.round_id or uuid.uuid4().hex
    session = process_round(
        round_id,
        body.events,
        body.samples,
        layout,
        timebase=timebase,
        course_name=body.course_name,
    )
    service.save(session)
    return session


@router.get("/rounds", response_model=List[RoundSummary])
def list_rounds(
    limit: int = Query(default=50, ge=1, le=500),
    service: RoundService = Depends(get_round_service),
) -> List[RoundSummary]:
    return service.list_summaries(limit=limit)


@router.get("/rounds/{round_id}", response_model=RoundSession)
def get_round(
    round_id: str,
    service: RoundService = Depends(get_round_service),
) -> RoundSession:
    return _load_session(service, round_id)


@router.delete("/rounds/{round_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_round(
    round_id: str,
    service: RoundService = Depends(get_round_service),
) -> Response:
    try:
        service.delete(round_id)
    except (RoundNotFound, ValueError):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="round_not_found"
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/rounds/{round_id}/shots/{shot_id}", response_model=RoundSession)
def override_shot(
    round_id: str,
    shot_id: str,
    body: ShotOverrideRequest,
    service: RoundService = Depends(get_round_service),
) -> RoundSession:
    session = _load_session(service, round_id)
    shot = session.shot(shot_id)
    if shot is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="shot_not_found"
        )

    try:
        apply_override(shot, body.field, body.value)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        )

    session.summary = summarize(session.shots, session.id, session.course_name)
    service.save(session)
    return session


@router.get("/trends", response_model=List[TrendData])
def get_trends(
    limit: int = Query(default=50, ge=1, le=500),
    service: RoundService = Depends(get_round_service),
) -> List[TrendData]:
    return TrendsCalculator().calculate(service.list_summaries(limit=limit))


__all__ = [
    "router",
    "create_round",
    "delete_round",
    "get_round",
    "get_trends",
    "list_courses",
    "list_rounds",
    "override_shot",
]
