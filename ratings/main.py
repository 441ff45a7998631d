from fastapi import FastAPI, Depends, Request, status
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session
from pathlib import Path
from typing import Optional
import logging

from .database.db import get_session, wait_for_db, StorageUnavailable
from .listing import load_ratings_page, parse_page
from .submissions import handle_submission, SUCCESS_MESSAGES

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Movie rating service",
    description="Browse movie ratings and add ratings, movies and reviewers",
    version="1.0.0"
)

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


@app.on_event("startup")
async def startup_event():
    logger.info("Launching the movie rating service...")
    wait_for_db()
    logger.info("The service is ready to work")


@app.exception_handler(StorageUnavailable)
async def storage_unavailable_handler(request: Request, exc: StorageUnavailable):
    return PlainTextResponse(
        f"Connection failed: {exc}",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


def render_page(
        request: Request,
        session: Session,
        page: Optional[str],
        success: Optional[str],
        error: Optional[str] = None
):
    try:
        listing = load_ratings_page(session, parse_page(page))
    except SQLAlchemyError as e:
        logger.error(f"Error when loading ratings: {str(e)}")
        raise StorageUnavailable(str(e))

    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "listing": listing,
            "success_message": SUCCESS_MESSAGES.get(success or ""),
            "error_message": error,
        }
    )


@app.get("/",
         response_class=HTMLResponse,
         summary="List ratings with the add forms")
def read_ratings(
        request: Request,
        page: Optional[str] = None,
        success: Optional[str] = None,
        session: Session = Depends(get_session)
):
    return render_page(request, session, page, success)


@app.post("/",
          response_class=HTMLResponse,
          summary="Add a rating, movie or reviewer",
          responses={
              302: {"description": "Row added, redirecting back to the listing"}
          })
async def submit_form(request: Request, session: Session = Depends(get_session)):
    form = await request.form()
    result = handle_submission(session, form)
    if result.success:
        return RedirectResponse(
            url=f"{request.url.path}?success={result.success}",
            status_code=status.HTTP_302_FOUND
        )

    return render_page(
        request,
        session,
        request.query_params.get("page"),
        request.query_params.get("success"),
        result.error
    )
