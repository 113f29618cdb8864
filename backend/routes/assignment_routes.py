from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, contains_eager

from backend.auth.dependencies import get_current_user_id
from backend.core.errors import integrity_error_to_http
from backend.core.patch import collect_patch_values
from backend.core.responses import DataResponse, ListResponse, MessageDataResponse
from backend.core.validators import normalize_optional_text, normalize_required_text
from backend.database import get_db
from backend.models.assignment import ASSIGNMENT_STATUSES, DEFAULT_ASSIGNMENT_STATUS, Assignment
from backend.models.course import Course
from backend.routes.course_routes import COURSE_NOT_FOUND, get_owned_course

router = APIRouter(tags=['assignments'])
course_router = APIRouter(tags=['assignments'])

ASSIGNMENT_NOT_FOUND = 'Assignment not found'
INVALID_STATUS = 'Status must be either Pending or Completed'
UPDATABLE_ASSIGNMENT_FIELDS = ('title', 'description', 'due_date', 'status')
NULLABLE_ASSIGNMENT_FIELDS = frozenset({'description'})


def ensure_valid_status(value: str | None) -> None:
    if value is not None and value not in ASSIGNMENT_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=INVALID_STATUS,
        )


class CreateAssignmentRequest(BaseModel):
    course_id: int
    title: str = Field(max_length=200)
    description: str | None = None
    due_date: date
    status: str | None = DEFAULT_ASSIGNMENT_STATUS

    @field_validator('title')
    @classmethod
    def validate_title(cls, value: str) -> str:
        return normalize_required_text(value, 'title')

    @field_validator('description')
    @classmethod
    def validate_description(cls, value: str | None) -> str | None:
        return normalize_optional_text(value)

    @field_validator('status')
    @classmethod
    def validate_status(cls, value: str | None) -> str:
        return value or DEFAULT_ASSIGNMENT_STATUS


class UpdateAssignmentRequest(BaseModel):
    title: str | None = Field(default=None, max_length=200)
    description: str | None = None
    due_date: date | None = None
    status: str | None = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, value: str | None) -> str | None:
        return normalize_required_text(value, 'title')

    @field_validator('description')
    @classmethod
    def validate_description(cls, value: str | None) -> str | None:
        return normalize_optional_text(value)


class AssignmentResponse(BaseModel):
    assignment_id: int
    course_id: int
    title: str
    description: str | None = None
    due_date: date
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class AssignmentWithCourseResponse(AssignmentResponse):
    course_name: str
    course_code: str


def assignments_with_course(db: Session):
    return db.query(Assignment).join(Assignment.course).options(contains_eager(Assignment.course))


def get_authorized_assignment(
    db: Session,
    assignment_id: int,
    user_id: int,
    action: str,
    for_update: bool = False,
) -> Assignment:
    """Load an assignment and check that its course belongs to ``user_id``.

    Unlike courses, a foreign assignment is reported as 403 rather than 404.
    """
    query = assignments_with_course(db).filter(Assignment.assignment_id == assignment_id)
    if for_update:
        query = query.with_for_update()

    assignment = query.first()
    if assignment is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=ASSIGNMENT_NOT_FOUND,
        )

    if assignment.course.user_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f'Not authorized to {action} this assignment',
        )
    return assignment


@course_router.get('/{course_id}/assignments', response_model=ListResponse[AssignmentWithCourseResponse])
def list_course_assignments(
    course_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    get_owned_course(db, course_id, user_id)

    assignments = assignments_with_course(db).filter(
        Assignment.course_id == course_id,
    ).order_by(Assignment.due_date.asc(), Assignment.assignment_id.asc()).all()

    data = [AssignmentWithCourseResponse.model_validate(assignment) for assignment in assignments]
    return ListResponse[AssignmentWithCourseResponse](count=len(data), data=data)


@router.get('', response_model=ListResponse[AssignmentWithCourseResponse])
def list_assignments(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    assignments = assignments_with_course(db).filter(
        Course.user_id == user_id,
    ).order_by(Assignment.due_date.asc(), Assignment.assignment_id.asc()).all()

    data = [AssignmentWithCourseResponse.model_validate(assignment) for assignment in assignments]
    return ListResponse[AssignmentWithCourseResponse](count=len(data), data=data)


@router.get('/{assignment_id}', response_model=DataResponse[AssignmentWithCourseResponse])
def get_assignment(
    assignment_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    assignment = get_authorized_assignment(db, assignment_id, user_id, action='access')
    return DataResponse[AssignmentWithCourseResponse](data=AssignmentWithCourseResponse.model_validate(assignment))


@router.post('', response_model=MessageDataResponse[AssignmentResponse], status_code=status.HTTP_201_CREATED)
def create_assignment(
    data: CreateAssignmentRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    # Lock the parent course so it cannot vanish between the check and the insert.
    get_owned_course(db, data.course_id, user_id, for_update=True)
    ensure_valid_status(data.status)

    assignment = Assignment(
        course_id=data.course_id,
        title=data.title,
        description=data.description,
        due_date=data.due_date,
        status=data.status,
    )

    try:
        db.add(assignment)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise integrity_error_to_http(
            exc,
            not_found_detail=COURSE_NOT_FOUND,
            invalid_detail=INVALID_STATUS,
        ) from exc

    db.refresh(assignment)

    return MessageDataResponse[AssignmentResponse](
        message='Assignment created successfully',
        data=AssignmentResponse.model_validate(assignment),
    )


@router.put('/{assignment_id}', response_model=MessageDataResponse[AssignmentResponse])
def update_assignment(
    assignment_id: int,
    data: UpdateAssignmentRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    values = collect_patch_values(data, UPDATABLE_ASSIGNMENT_FIELDS, NULLABLE_ASSIGNMENT_FIELDS)

    assignment = get_authorized_assignment(db, assignment_id, user_id, action='update', for_update=True)
    ensure_valid_status(values.get('status'))

    for field, value in values.items():
        setattr(assignment, field, value)

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise integrity_error_to_http(exc, invalid_detail=INVALID_STATUS) from exc

    db.refresh(assignment)

    return MessageDataResponse[AssignmentResponse](
        message='Assignment updated successfully',
        data=AssignmentResponse.model_validate(assignment),
    )


@router.delete('/{assignment_id}', response_model=MessageDataResponse[AssignmentResponse])
def delete_assignment(
    assignment_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    assignment = get_authorized_assignment(db, assignment_id, user_id, action='delete', for_update=True)
    deleted = AssignmentResponse.model_validate(assignment)

    db.delete(assignment)
    db.commit()

    return MessageDataResponse[AssignmentResponse](
        message='Assignment deleted successfully',
        data=deleted,
    )
