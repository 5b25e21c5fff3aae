"""Main application module."""
from typing import Optional

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, File, Form, Query, Request, UploadFile, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import accounts
import posts
from config import Settings, load_settings
from database import create_db_engine, create_session_factory, get_db, init_models
from errors import AppError
from logger import get_logger, setup_logger
from models import UPLOAD_URL_PREFIX
from schemas import LoginRequest, MessageOut, PostOut, PostPageOut, SignupRequest, TokenOut, UserOut
from security import TokenService, get_current_user_id
from storage import ImageStore, read_image_upload

logger = get_logger("api")

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
}


def get_token_service(request: Request) -> TokenService:
    """Dependency returning the token service built at startup"""
    return request.app.state.token_service


def get_image_store(request: Request) -> ImageStore:
    """Dependency returning the image store built at startup"""
    return request.app.state.image_store


def to_page_out(page: posts.Page) -> PostPageOut:
    return PostPageOut(
        posts=[PostOut.model_validate(post) for post in page.posts],
        total_posts=page.total,
        current_page=page.page,
        total_pages=page.total_pages,
    )


# =============================================================================
# Auth routes
# =============================================================================

auth_router = APIRouter(prefix="/auth", tags=["auth"])


@auth_router.post("/signup", status_code=status.HTTP_201_CREATED, response_model=UserOut)
def signup(payload: SignupRequest, db: Session = Depends(get_db)):
    """Register a new user with an email and password"""
    user = accounts.signup(db, payload.email, payload.password)
    return UserOut.model_validate(user)


@auth_router.post("/login", response_model=TokenOut)
def login(payload: LoginRequest,
          db: Session = Depends(get_db),
          tokens: TokenService = Depends(get_token_service)):
    """Authenticate a user using email and password and issue a bearer token"""
    token = accounts.login(db, payload.email, payload.password, tokens)
    return TokenOut(token=token, expires_in=tokens.lifetime_seconds)


@auth_router.get("/user", response_model=UserOut)
def read_current_user(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    """Retrieve the currently authenticated user"""
    return UserOut.model_validate(accounts.get_user(db, user_id))


# =============================================================================
# Post routes
# =============================================================================

posts_router = APIRouter(prefix="/posts", tags=["posts"])


@posts_router.post("", status_code=status.HTTP_201_CREATED, response_model=PostOut)
def create_post(title: Optional[str] = Form(None),
                content: Optional[str] = Form(None),
                image_file: Optional[UploadFile] = File(None, alias="imageFile"),
                user_id: int = Depends(get_current_user_id),
                db: Session = Depends(get_db),
                images: ImageStore = Depends(get_image_store)):
    """Create a new post owned by the authenticated user"""
    image = read_image_upload(image_file)
    post = posts.create_post(db, images, title, content, user_id, image)
    return PostOut.model_validate(post)


@posts_router.get("", response_model=PostPageOut)
def list_posts(page: int = Query(1),
               limit: int = Query(posts.DEFAULT_PAGE_SIZE),
               db: Session = Depends(get_db)):
    """Retrieve one page of all posts, newest first"""
    return to_page_out(posts.list_posts(db, page, limit))


@posts_router.get("/userposts", response_model=PostPageOut)
def list_user_posts(page: int = Query(1),
                    limit: int = Query(posts.DEFAULT_PAGE_SIZE),
                    user_id: int = Depends(get_current_user_id),
                    db: Session = Depends(get_db)):
    """Retrieve one page of the authenticated user's posts"""
    return to_page_out(posts.list_posts_by_owner(db, user_id, page, limit))


@posts_router.get("/{post_id}", response_model=PostOut)
def read_post(post_id: int, db: Session = Depends(get_db)):
    """Retrieve a single post by its ID"""
    return PostOut.model_validate(posts.get_post(db, post_id))


@posts_router.put("/{post_id}", response_model=PostOut)
def update_post(post_id: int,
                title: Optional[str] = Form(None),
                content: Optional[str] = Form(None),
                image_file: Optional[UploadFile] = File(None, alias="imageFile"),
                user_id: int = Depends(get_current_user_id),
                db: Session = Depends(get_db),
                images: ImageStore = Depends(get_image_store)):
    """Update a post by ID. Only the owner can update the post"""
    image = read_image_upload(image_file)
    post = posts.update_post(db, images, post_id, user_id, title=title, content=content, image=image)
    return PostOut.model_validate(post)


@posts_router.delete("/{post_id}", response_model=MessageOut)
def delete_post(post_id: int,
                user_id: int = Depends(get_current_user_id),
                db: Session = Depends(get_db),
                images: ImageStore = Depends(get_image_store)):
    """Delete a post by ID. Only the owner can delete the post"""
    posts.delete_post(db, images, post_id, user_id)
    return MessageOut(message="Post deleted successfully")


# =============================================================================
# Error handling
# =============================================================================

async def handle_app_error(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    problems = exc.errors()
    message = "Invalid request"
    if problems:
        first = problems[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


def server_error_response(request: Request, exc: Exception) -> JSONResponse:
    content = {"error": "Server error"}
    if not request.app.state.settings.is_production:
        content["details"] = str(exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


async def handle_database_error(request: Request, exc: SQLAlchemyError):
    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return server_error_response(request, exc)


async def handle_unexpected_error(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return server_error_response(request, exc)


# =============================================================================
# Application factory
# =============================================================================

def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the API with its database, token service and image store"""
    settings = settings or load_settings()
    setup_logger(settings.log_level, settings.log_file or None)

    engine = create_db_engine(settings.database_url, echo=settings.sql_echo)
    init_models(engine)

    app = FastAPI(title="Blog API", version="1.0.0")
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.token_service = TokenService(
        settings.secret_key,
        algorithm=settings.algorithm,
        expire_minutes=settings.access_token_expire_minutes,
    )
    app.state.image_store = ImageStore(settings.upload_dir)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.client_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(SQLAlchemyError, handle_database_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(auth_router)
    app.include_router(posts_router)
    app.mount(UPLOAD_URL_PREFIX, StaticFiles(directory=settings.upload_dir), name="uploads")

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    logger.info("Blog API configured (environment=%s)", settings.environment)
    return app


if __name__ == "__main__":
    app_settings = load_settings()
    uvicorn.run(create_app(app_settings), host=app_settings.host, port=app_settings.port)
