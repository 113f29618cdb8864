"""Assignment model definitions."""

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from backend.database import Base

ASSIGNMENT_STATUSES = ("Pending", "Completed")
DEFAULT_ASSIGNMENT_STATUS = "Pending"


class Assignment(Base):
    """Represents an assignment; ownership is resolved through its course."""
    __tablename__ = "assignments"
    __table_args__ = (
        CheckConstraint("status IN ('Pending', 'Completed')", name="ck_assignments_status"),
    )

    assignment_id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.course_id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    due_date = Column(Date, nullable=False, index=True)
    status = Column(
        String(20),
        default=DEFAULT_ASSIGNMENT_STATUS,
        server_default=DEFAULT_ASSIGNMENT_STATUS,
        nullable=False,
        index=True,
    )
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    course = relationship("Course", back_populates="assignments")

    @property
    def course_name(self) -> str | None:
        return self.course.course_name if self.course else None

    @property
    def course_code(self) -> str | None:
        return self.course.course_code if self.course else None
