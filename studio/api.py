"""FastAPI app for the studio site: content entities, leads, media, search and stats.

Routes stay thin: they validate input, call a pipeline from the
``StudioContainer`` and shape the response. Domain errors are translated to
status codes by the exception handlers registered in ``create_app``.
"""
from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
from fastapi import APIRouter, Depends, FastAPI, File, Form, Query, Request, UploadFile, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from .config import Settings, get_settings
from .container import StudioContainer
from .errors import (
    DuplicateKeyError,
    NotFoundError,
    NotificationError,
    StorageIOError,
    StudioError,
    ValidationError,
)
from .logging_config import setup_logging
from .media import MediaStore
from .models import Post, Project, TeamMember
from .notifier import Notifier
from .pipelines.media_bound import Attachment
from .schemas import (
    ContactCreate,
    ContactOut,
    ErrorResponse,
    HealthResponse,
    MessageResponse,
    PostCreate,
    PostOut,
    ProjectCreate,
    ProjectOut,
    SearchResponse,
    StatsResponse,
    SubscribeRequest,
    SubscriberOut,
    TeamMemberCreate,
    TeamMemberOut,
    parse_social,
    validate_input,
)

logger = structlog.get_logger(__name__)

ERROR_STATUS: dict[type[StudioError], int] = {
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    DuplicateKeyError: status.HTTP_409_CONFLICT,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    StorageIOError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    NotificationError: status.HTTP_502_BAD_GATEWAY,
}

router = APIRouter(prefix="/api")


def get_container(request: Request) -> StudioContainer:
    return request.app.state.container


# === Presenters: image_ref becomes a public URL ===

def project_out(record: Project, media: MediaStore) -> ProjectOut:
    return ProjectOut.model_validate(record).model_copy(update={"image": media.url_for(record.image_ref)})


def post_out(record: Post, media: MediaStore) -> PostOut:
    return PostOut.model_validate(record).model_copy(update={"image": media.url_for(record.image_ref)})


def team_member_out(record: TeamMember, media: MediaStore) -> TeamMemberOut:
    return TeamMemberOut.model_validate(record).model_copy(update={"image": media.url_for(record.image_ref)})


def _submitted(**fields) -> dict:
    """Drop form fields the client did not send."""
    return {k: v for k, v in fields.items() if v is not None}


async def read_attachment(image: UploadFile | None, max_bytes: int) -> Attachment | None:
    """Read at most ``max_bytes`` of the upload; anything larger is rejected unread."""
    if image is None or not image.filename:
        return None
    try:
        data = await image.read(max_bytes + 1)
    finally:
        await image.close()
    if len(data) > max_bytes:
        raise ValidationError(f"Uploaded file exceeds {max_bytes} bytes")
    return Attachment(filename=image.filename, data=data)


# === Leads ===

@router.post("/contact", response_model=ContactOut, status_code=status.HTTP_201_CREATED)
async def submit_contact(payload: ContactCreate, container: StudioContainer = Depends(get_container)):
    """Save a contact form submission and notify the studio."""
    contact = await container.leads.submit_contact(payload)
    return ContactOut.model_validate(contact)


@router.get("/contacts", response_model=list[ContactOut])
async def list_contacts(container: StudioContainer = Depends(get_container)):
    return [ContactOut.model_validate(c) for c in await container.leads.list_contacts()]


@router.delete("/contacts/{contact_id}", response_model=MessageResponse)
async def delete_contact(contact_id: str, container: StudioContainer = Depends(get_container)):
    await container.leads.delete_contact(contact_id)
    return MessageResponse(message="Contact deleted")


@router.post("/newsletter", response_model=SubscriberOut, status_code=status.HTTP_201_CREATED)
async def subscribe(payload: SubscribeRequest, container: StudioContainer = Depends(get_container)):
    """Subscribe an email to the newsletter; 409 if it is already subscribed."""
    subscriber = await container.leads.subscribe(payload.email)
    return SubscriberOut.model_validate(subscriber)


@router.get("/newsletter", response_model=list[SubscriberOut])
async def list_subscribers(container: StudioContainer = Depends(get_container)):
    return [SubscriberOut.model_validate(s) for s in await container.leads.list_subscribers()]


@router.delete("/newsletter/{subscriber_id}", response_model=MessageResponse)
async def delete_subscriber(subscriber_id: str, container: StudioContainer = Depends(get_container)):
    await container.leads.delete_subscriber(subscriber_id)
    return MessageResponse(message="Subscriber deleted")


# === Projects ===

@router.get("/projects", response_model=list[ProjectOut])
async def list_projects(container: StudioContainer = Depends(get_container)):
    """All projects, newest ``date`` first."""
    records = await container.projects.list("date", descending=True)
    return [project_out(r, container.media) for r in records]


@router.get("/projects/{project_id}", response_model=ProjectOut)
async def get_project(project_id: str, container: StudioContainer = Depends(get_container)):
    return project_out(await container.projects.get(project_id), container.media)


@router.post("/projects", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
async def create_project(
    title: str | None = Form(None),
    category: str | None = Form(None),
    description: str | None = Form(None),
    date: str | None = Form(None),
    featured: str | None = Form(None),
    image: UploadFile | None = File(None),
    container: StudioContainer = Depends(get_container),
):
    """Create a project from multipart form fields plus an optional ``image`` file."""
    fields = validate_input(
        ProjectCreate,
        **_submitted(title=title, category=category, description=description, date=date, featured=featured),
    )
    attachment = await read_attachment(image, container.settings.media.max_bytes)
    record = await container.project_manager.create_with_media(fields.model_dump(), attachment)
    return project_out(record, container.media)


@router.delete("/projects/{project_id}", response_model=MessageResponse)
async def delete_project(project_id: str, container: StudioContainer = Depends(get_container)):
    await container.project_manager.delete_with_media(project_id)
    return MessageResponse(message="Project deleted")


# === Posts ===

@router.get("/posts", response_model=list[PostOut])
async def list_posts(container: StudioContainer = Depends(get_container)):
    """All posts, most recently published first."""
    records = await container.posts.list("published_at", descending=True)
    return [post_out(r, container.media) for r in records]


@router.get("/posts/{post_id}", response_model=PostOut)
async def get_post(post_id: str, container: StudioContainer = Depends(get_container)):
    return post_out(await container.posts.get(post_id), container.media)


@router.post("/posts", response_model=PostOut, status_code=status.HTTP_201_CREATED)
async def create_post(
    title: str | None = Form(None),
    category: str | None = Form(None),
    content: str | None = Form(None),
    author: str | None = Form(None),
    published_at: str | None = Form(None),
    image: UploadFile | None = File(None),
    container: StudioContainer = Depends(get_container),
):
    fields = validate_input(
        PostCreate,
        **_submitted(title=title, category=category, content=content, author=author, published_at=published_at),
    )
    attachment = await read_attachment(image, container.settings.media.max_bytes)
    record = await container.post_manager.create_with_media(fields.model_dump(), attachment)
    return post_out(record, container.media)


@router.delete("/posts/{post_id}", response_model=MessageResponse)
async def delete_post(post_id: str, container: StudioContainer = Depends(get_container)):
    await container.post_manager.delete_with_media(post_id)
    return MessageResponse(message="Post deleted")


# === Team ===

@router.get("/team", response_model=list[TeamMemberOut])
async def list_team(container: StudioContainer = Depends(get_container)):
    """Team members in the order they were added."""
    records = await container.team.list("created_at", descending=False)
    return [team_member_out(r, container.media) for r in records]


@router.get("/team/{member_id}", response_model=TeamMemberOut)
async def get_team_member(member_id: str, container: StudioContainer = Depends(get_container)):
    return team_member_out(await container.team.get(member_id), container.media)


@router.post("/team", response_model=TeamMemberOut, status_code=status.HTTP_201_CREATED)
async def create_team_member(
    name: str | None = Form(None),
    role: str | None = Form(None),
    bio: str | None = Form(None),
    social: str | None = Form(None, description="JSON object with instagram/linkedin/twitter"),
    image: UploadFile | None = File(None),
    container: StudioContainer = Depends(get_container),
):
    fields = validate_input(
        TeamMemberCreate,
        **_submitted(name=name, role=role, bio=bio),
        social=parse_social(social),
    )
    attachment = await read_attachment(image, container.settings.media.max_bytes)
    record = await container.team_manager.create_with_media(fields.model_dump(), attachment)
    return team_member_out(record, container.media)


@router.delete("/team/{member_id}", response_model=MessageResponse)
async def delete_team_member(member_id: str, container: StudioContainer = Depends(get_container)):
    await container.team_manager.delete_with_media(member_id)
    return MessageResponse(message="Team member deleted")


# === Search & stats ===

@router.get("/search", response_model=SearchResponse)
async def search(
    q: str | None = Query(None, description="Case-insensitive substring"),
    container: StudioContainer = Depends(get_container),
):
    result = await container.search.search(q)
    return SearchResponse(
        projects=[project_out(p, container.media) for p in result.projects],
        posts=[post_out(p, container.media) for p in result.posts],
    )


@router.get("/stats", response_model=StatsResponse)
async def stats(container: StudioContainer = Depends(get_container)):
    """Record counts per collection for the admin dashboard."""
    return StatsResponse(**(await container.stats.stats()).as_dict())


# === Exception handlers ===

async def studio_error_handler(request: Request, exc: StudioError):
    """Translate a domain error into its status code."""
    status_code = next(
        (code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    if status_code >= 500:
        log = logger.error
    else:
        log = logger.info
    log(exc.code, method=request.method, path=request.url.path, detail=str(exc))

    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=exc.code,
            detail=str(exc),
            record_id=getattr(exc, "record_id", None),
        ).model_dump(exclude_none=True),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.info("request_validation_failed", path=request.url.path, errors=jsonable_encoder(exc.errors()))
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"error": ValidationError.code, "detail": jsonable_encoder(exc.errors())},
    )


async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error("unexpected_error", method=request.method, path=request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(error="internal_error", detail="Internal server error").model_dump(exclude_none=True),
    )


def create_app(settings: Settings | None = None, notifier: Notifier | None = None) -> FastAPI:
    """Build the application; services open in the lifespan and close on shutdown."""
    settings = settings or get_settings()
    container = StudioContainer(settings, notifier=notifier)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan context manager for startup/shutdown logic."""
        setup_logging(settings.logging)
        logger.info("starting_up", app=settings.app_name, version=settings.version)
        await container.open()

        yield

        await container.close()
        logger.info("shutting_down", app=settings.app_name)

    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        description="Portfolio, blog, team and lead intake backend for the studio site",
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StudioError, studio_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="ok", version=settings.version)

    @app.get("/")
    async def root():
        """Root endpoint with API info."""
        return {
            "app": settings.app_name,
            "version": settings.version,
            "endpoints": {
                "health": "/health",
                "contact": "/api/contact",
                "newsletter": "/api/newsletter",
                "projects": "/api/projects",
                "posts": "/api/posts",
                "team": "/api/team",
                "search": "/api/search?q=",
                "stats": "/api/stats",
                "media": f"{settings.media.url_prefix}/{{ref}}",
                "docs": "/docs",
            },
        }

    app.include_router(router)
    app.mount(
        settings.media.url_prefix,
        StaticFiles(directory=settings.media.root_dir, check_dir=False),
        name="media",
    )
    return app


app = create_app()
