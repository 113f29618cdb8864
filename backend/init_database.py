"""Drop and recreate the planner tables, optionally loading sample data.

Usage:
    python -m backend.init_database [--seed]
"""
import argparse
import logging
import sys
from datetime import date

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth.passwords import get_password_hash
from backend.database import Base, SessionLocal, engine
from backend.models.assignment import Assignment
from backend.models.course import Course
from backend.models.user import User

logger = logging.getLogger(__name__)

SAMPLE_PASSWORD = 'password123'

SAMPLE_USERS = [
    ('Shubhreet Kaur', 'shubhreet@example.com'),
    ('Test Student', 'test@example.com'),
]

# (owner index, course_name, course_code, semester)
SAMPLE_COURSES = [
    (0, 'Full Stack Development', 'PROG2500', 'Winter 2026'),
    (0, 'Database Management', 'PROG1400', 'Winter 2026'),
    (0, 'Web Programming', 'PROG1700', 'Winter 2026'),
    (1, 'Mobile Development', 'PROG3000', 'Winter 2026'),
]

# (course index, title, description, due_date, status)
SAMPLE_ASSIGNMENTS = [
    (0, 'Sprint 1 - Backend API', 'Build REST API with PostgreSQL', date(2026, 2, 15), 'Pending'),
    (0, 'Sprint 2 - Frontend', 'Create React frontend', date(2026, 3, 1), 'Pending'),
    (1, 'Database Design Project', 'Design normalized database schema', date(2026, 2, 20), 'Pending'),
    (1, 'SQL Queries Assignment', 'Write complex SQL queries', date(2026, 2, 12), 'Completed'),
    (2, 'HTML/CSS Portfolio', 'Build personal portfolio website', date(2026, 2, 18), 'Completed'),
    (2, 'JavaScript Mini-Project', 'Interactive web application', date(2026, 2, 25), 'Pending'),
    (3, 'Android App Development', 'Build native Android app', date(2026, 3, 5), 'Pending'),
]


def reset_schema() -> None:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


def seed_sample_data(db: Session) -> dict[str, int]:
    password_hash = get_password_hash(SAMPLE_PASSWORD)
    users = [User(name=name, email=email, password_hash=password_hash) for name, email in SAMPLE_USERS]
    db.add_all(users)
    db.flush()

    courses = [
        Course(user_id=users[owner].user_id, course_name=name, course_code=code, semester=semester)
        for owner, name, code, semester in SAMPLE_COURSES
    ]
    db.add_all(courses)
    db.flush()

    db.add_all(
        Assignment(
            course_id=courses[course_index].course_id,
            title=title,
            description=description,
            due_date=due_date,
            status=status,
        )
        for course_index, title, description, due_date, status in SAMPLE_ASSIGNMENTS
    )
    db.commit()

    return {'users': len(users), 'courses': len(courses), 'assignments': len(SAMPLE_ASSIGNMENTS)}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description='Initialize the StudyPlanner database.')
    parser.add_argument('--seed', action='store_true', help='insert sample users, courses and assignments')
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    try:
        reset_schema()
        logger.info('Recreated users, courses and assignments tables')
        if args.seed:
            db = SessionLocal()
            try:
                summary = seed_sample_data(db)
            finally:
                db.close()
            logger.info('Inserted sample data: %s', summary)
    except SQLAlchemyError:
        logger.exception('Error initializing database')
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
