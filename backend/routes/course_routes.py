from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from backend.auth.dependencies import get_current_user_id
from backend.core.patch import collect_patch_values
from backend.core.responses import DataResponse, ListResponse, MessageDataResponse
from backend.core.validators import normalize_optional_text, normalize_required_text
from backend.database import get_db
from backend.models.course import Course

router = APIRouter(tags=['courses'])

COURSE_NOT_FOUND = 'Course not found'
UPDATABLE_COURSE_FIELDS = ('course_name', 'course_code', 'semester')
NULLABLE_COURSE_FIELDS = frozenset({'semester'})


class CreateCourseRequest(BaseModel):
    course_name: str = Field(max_length=200)
    course_code: str = Field(max_length=50)
    semester: str | None = Field(default=None, max_length=50)

    @field_validator('course_name', 'course_code')
    @classmethod
    def validate_required(cls, value: str, info) -> str:
        return normalize_required_text(value, info.field_name)

    @field_validator('semester')
    @classmethod
    def validate_semester(cls, value: str | None) -> str | None:
        return normalize_optional_text(value)


class UpdateCourseRequest(BaseModel):
    course_name: str | None = Field(default=None, max_length=200)
    course_code: str | None = Field(default=None, max_length=50)
    semester: str | None = Field(default=None, max_length=50)

    @field_validator('course_name', 'course_code')
    @classmethod
    def validate_required(cls, value: str | None, info) -> str | None:
        return normalize_required_text(value, info.field_name)

    @field_validator('semester')
    @classmethod
    def validate_semester(cls, value: str | None) -> str | None:
        return normalize_optional_text(value)


class CourseResponse(BaseModel):
    course_id: int
    user_id: int
    course_name: str
    course_code: str
    semester: str | None = None
    created_at: datetime

    class Config:
        from_attributes = True


def get_owned_course(db: Session, course_id: int, user_id: int, for_update: bool = False) -> Course:
    """Load a course owned by ``user_id``; missing and foreign courses are both 404."""
    query = db.query(Course).filter(
        Course.course_id == course_id,
        Course.user_id == user_id,
    )
    if for_update:
        query = query.with_for_update()

    course = query.first()
    if course is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=COURSE_NOT_FOUND,
        )
    return course


@router.get('', response_model=ListResponse[CourseResponse])
def list_courses(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    courses = db.query(Course).filter(
        Course.user_id == user_id,
    ).order_by(Course.created_at.desc(), Course.course_id.desc()).all()

    data = [CourseResponse.model_validate(course) for course in courses]
    return ListResponse[CourseResponse](count=len(data), data=data)


@router.get('/{course_id}', response_model=DataResponse[CourseResponse])
def get_course(
    course_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    course = get_owned_course(db, course_id, user_id)
    return DataResponse[CourseResponse](data=CourseResponse.model_validate(course))


@router.post('', response_model=MessageDataResponse[CourseResponse], status_code=status.HTTP_201_CREATED)
def create_course(
    data: CreateCourseRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    course = Course(
        user_id=user_id,
        course_name=data.course_name,
        course_code=data.course_code,
        semester=data.semester,
    )
    db.add(course)
    db.commit()
    db.refresh(course)

    return MessageDataResponse[CourseResponse](
        message='Course created successfully',
        data=CourseResponse.model_validate(course),
    )


@router.put('/{course_id}', response_model=MessageDataResponse[CourseResponse])
def update_course(
    course_id: int,
    data: UpdateCourseRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    values = collect_patch_values(data, UPDATABLE_COURSE_FIELDS, NULLABLE_COURSE_FIELDS)

    course = get_owned_course(db, course_id, user_id, for_update=True)
    for field, value in values.items():
        setattr(course, field, value)
    db.commit()
    db.refresh(course)

    return MessageDataResponse[CourseResponse](
        message='Course updated successfully',
        data=CourseResponse.model_validate(course),
    )


@router.delete('/{course_id}', response_model=MessageDataResponse[CourseResponse])
def delete_course(
    course_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    course = get_owned_course(db, course_id, user_id, for_update=True)
    deleted = CourseResponse.model_validate(course)

    db.delete(course)
    db.commit()

    return MessageDataResponse[CourseResponse](
        message='Course deleted successfully',
        data=deleted,
    )
