from pydantic import BaseModel
from sqlmodel import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from typing import Mapping, Optional
from datetime import date
import logging

from .models import Movie, Reviewer, Rating
from .models.ratings import MIN_YEAR, MAX_YEAR, MIN_STARS, MAX_STARS, MAX_TEXT_LENGTH, MAX_ID

logger = logging.getLogger(__name__)

RATING_ADDED = "rating_added"
MOVIE_ADDED = "movie_added"
REVIEWER_ADDED = "reviewer_added"

SUCCESS_MESSAGES = {
    RATING_ADDED: "Rating added successfully!",
    MOVIE_ADDED: "Movie added successfully!",
    REVIEWER_ADDED: "Reviewer added successfully!",
}


class SubmissionResult(BaseModel):
    """Outcome of a POST: a success marker to redirect with, an error to show, or neither."""
    success: Optional[str] = None
    error: Optional[str] = None


class InvalidSubmission(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def form_value(form: Mapping, name: str) -> Optional[str]:
    value = form.get(name)
    if value is not None and not isinstance(value, str):
        # file parts of a multipart body arrive as UploadFile
        raise InvalidSubmission(f"Field '{name}' must be plain text.")
    return value


def require(form: Mapping, names, message: str) -> dict:
    values = {name: form_value(form, name) for name in names}
    if any(value is None for value in values.values()):
        raise InvalidSubmission(message)
    return values


def as_int(value: str, label: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidSubmission(f"{label} must be a whole number.")


def as_id(value: str, label: str) -> int:
    number = as_int(value, label)
    if number < 1 or number > MAX_ID:
        raise InvalidSubmission(f"{label} must be between 1 and {MAX_ID}.")
    return number


def required_text(value: str, label: str) -> str:
    value = value.strip()
    if not value:
        raise InvalidSubmission(f"{label} cannot be empty.")
    return bounded_text(value, label)


def optional_text(value: Optional[str], label: str) -> Optional[str]:
    value = (value or "").strip()
    return bounded_text(value, label) if value else None


def bounded_text(value: str, label: str) -> str:
    if len(value) > MAX_TEXT_LENGTH:
        raise InvalidSubmission(f"{label} must be at most {MAX_TEXT_LENGTH} characters.")
    return value


def optional_date(value: Optional[str]) -> Optional[date]:
    value = (value or "").strip()
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise InvalidSubmission("Rating date must be a valid date (YYYY-MM-DD).")


def insert(session: Session, row, conflict_message: str):
    """Commit a single row; a constraint violation means someone else got there first."""
    try:
        session.add(row)
        session.commit()
    except IntegrityError as e:
        session.rollback()
        logger.warning(f"Insert rejected by constraint: {e.orig}")
        raise InvalidSubmission(conflict_message)


def movie_exists(session: Session, movie_id: int) -> bool:
    return session.get(Movie, movie_id) is not None


def reviewer_exists(session: Session, reviewer_id: int) -> bool:
    return session.get(Reviewer, reviewer_id) is not None


def add_rating(session: Session, form: Mapping) -> SubmissionResult:
    fields = require(form, ("reviewer_id", "movie_id", "stars"), "Missing required fields for rating.")
    reviewer_id = as_id(fields["reviewer_id"], "Reviewer ID")
    movie_id = as_id(fields["movie_id"], "Movie ID")
    stars = as_int(fields["stars"], "Stars")
    if stars < MIN_STARS or stars > MAX_STARS:
        raise InvalidSubmission(f"Stars must be between {MIN_STARS} and {MAX_STARS}.")
    rating_date = optional_date(form_value(form, "rating_date"))

    if not movie_exists(session, movie_id):
        raise InvalidSubmission("Selected movie does not exist.")
    if not reviewer_exists(session, reviewer_id):
        raise InvalidSubmission("Selected reviewer does not exist.")

    insert(
        session,
        Rating(reviewer_id=reviewer_id, movie_id=movie_id, stars=stars, rating_date=rating_date),
        "Selected movie or reviewer does not exist.",
    )
    logger.info(f"Reviewer {reviewer_id} rated movie {movie_id} with {stars} stars")
    return SubmissionResult(success=RATING_ADDED)


def add_movie(session: Session, form: Mapping) -> SubmissionResult:
    fields = require(form, ("movie_id", "title", "year"), "Missing required fields for movie.")
    movie_id = as_id(fields["movie_id"], "Movie ID")
    title = required_text(fields["title"], "Movie title")
    year = as_int(fields["year"], "Year")
    if year < MIN_YEAR or year > MAX_YEAR:
        raise InvalidSubmission(f"Year must be between {MIN_YEAR} and {MAX_YEAR}.")
    director = optional_text(form_value(form, "director"), "Director")

    duplicate = "Movie ID already exists. Please use a different ID."
    if movie_exists(session, movie_id):
        raise InvalidSubmission(duplicate)

    insert(session, Movie(id=movie_id, title=title, year=year, director=director), duplicate)
    logger.info(f"A new movie has been added: ID {movie_id}, {title}")
    return SubmissionResult(success=MOVIE_ADDED)


def add_reviewer(session: Session, form: Mapping) -> SubmissionResult:
    fields = require(form, ("reviewer_id", "name"), "Missing required fields for reviewer.")
    reviewer_id = as_id(fields["reviewer_id"], "Reviewer ID")
    name = required_text(fields["name"], "Reviewer name")

    duplicate = "Reviewer ID already exists. Please use a different ID."
    if reviewer_exists(session, reviewer_id):
        raise InvalidSubmission(duplicate)

    insert(session, Reviewer(id=reviewer_id, name=name), duplicate)
    logger.info(f"A new reviewer has been added: ID {reviewer_id}, {name}")
    return SubmissionResult(success=REVIEWER_ADDED)


ACTIONS = {
    "add_rating": ("rating", add_rating),
    "add_movie": ("movie", add_movie),
    "add_reviewer": ("reviewer", add_reviewer),
}


def handle_submission(session: Session, form: Mapping) -> SubmissionResult:
    action = form.get("action") or ""
    if action not in ACTIONS:
        return SubmissionResult()
    entity, handler = ACTIONS[action]

    try:
        return handler(session, form)
    except InvalidSubmission as e:
        logger.warning(f"Rejected {action}: {e.message}")
        return SubmissionResult(error=e.message)
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error when adding a {entity}: {str(e)}")
        return SubmissionResult(error=f"Error adding {entity}: {str(e)}")
