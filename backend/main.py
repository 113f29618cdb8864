import logging
import time

import uvicorn
from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.core import config
from backend.core.errors import error_body, register_exception_handlers
from backend.core.responses import MessageResponse
from backend.database import SessionLocal, check_database_connection, ensure_schema, get_db
from backend.models import assignment, course, user  # noqa: F401
from backend.routes import assignment_routes, auth_routes, course_routes

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)

app = FastAPI(title='StudyPlanner API', version=config.APP_VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    # Browsers reject credentialed responses with a wildcard origin.
    allow_credentials=config.CORS_ORIGINS != ['*'],
    allow_methods=['*'],
    allow_headers=['*'],
)

register_exception_handlers(app)


@app.middleware('http')
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    logger.info(
        '%s %s -> %s (%.1f ms)',
        request.method,
        request.url.path,
        response.status_code,
        (time.perf_counter() - started) * 1000,
    )
    return response


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        ensure_schema()
        db = SessionLocal()
        try:
            check_database_connection(db)
        finally:
            db.close()
        logger.info('Connected to database; environment: %s', config.APP_ENV)
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and Postgres credentials.')
        raise


@app.get('/')
def root():
    return {
        'success': True,
        'message': 'StudyPlanner API is running',
        'version': config.APP_VERSION,
        'endpoints': {
            'auth': '/api/auth',
            'courses': '/api/courses',
            'assignments': '/api/assignments',
        },
    }


@app.get('/health', response_model=MessageResponse)
def health(db: Session = Depends(get_db)):
    try:
        check_database_connection(db)
    except SQLAlchemyError:
        logger.exception('Health check failed')
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=error_body('Database connection failed'),
        )
    return MessageResponse(success=True, message='Database connected')


app.include_router(auth_routes.router, prefix='/api/auth')
app.include_router(course_routes.router, prefix='/api/courses')
app.include_router(assignment_routes.course_router, prefix='/api/courses')
app.include_router(assignment_routes.router, prefix='/api/assignments')


def run() -> None:
    uvicorn.run('backend.main:app', host='0.0.0.0', port=config.PORT)


if __name__ == '__main__':
    run()
