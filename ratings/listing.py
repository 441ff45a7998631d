from sqlmodel import Session, select, col
from sqlalchemy import func
from typing import Optional
import math
import logging

from .models import Movie, Reviewer, Rating, RatingRow, MovieOption, ReviewerOption, RatingsPage

logger = logging.getLogger(__name__)

PAGE_SIZE = 10


def parse_page(raw: Optional[str]) -> int:
    """Page numbers below 1 and unparsable values both mean the first page."""
    try:
        page = int(raw) if raw is not None else 1
    except ValueError:
        return 1
    return max(page, 1)


def page_offset(page: int, page_size: int = PAGE_SIZE) -> int:
    return (page - 1) * page_size


def count_ratings(session: Session) -> int:
    statement = (
        select(func.count())
        .select_from(Rating)
        .join(Movie, col(Rating.movie_id) == col(Movie.id))
        .join(Reviewer, col(Rating.reviewer_id) == col(Reviewer.id))
    )
    return session.exec(statement).one()


def fetch_ratings(session: Session, page: int, page_size: int = PAGE_SIZE):
    statement = (
        select(
            col(Movie.title),
            col(Movie.year),
            col(Movie.director),
            col(Reviewer.name).label("reviewer_name"),
            col(Rating.stars),
            col(Rating.rating_date),
        )
        .select_from(Rating)
        .join(Movie, col(Rating.movie_id) == col(Movie.id))
        .join(Reviewer, col(Rating.reviewer_id) == col(Reviewer.id))
        .order_by(
            col(Rating.rating_date).desc().nulls_last(),
            col(Movie.title).asc(),
            col(Rating.id).asc(),
        )
        .offset(page_offset(page, page_size))
        .limit(page_size)
    )
    return [RatingRow(**row._mapping) for row in session.exec(statement).all()]


def movie_options(session: Session):
    rows = session.exec(select(col(Movie.id), col(Movie.title)).order_by(col(Movie.title))).all()
    return [MovieOption(id=row.id, title=row.title) for row in rows]


def reviewer_options(session: Session):
    rows = session.exec(select(col(Reviewer.id), col(Reviewer.name)).order_by(col(Reviewer.name))).all()
    return [ReviewerOption(id=row.id, name=row.name) for row in rows]


def load_ratings_page(session: Session, page: int, page_size: int = PAGE_SIZE) -> RatingsPage:
    total_records = count_ratings(session)
    total_pages = math.ceil(total_records / page_size)
    # no rows exist past the last page, so the offset is never sent for those
    ratings = fetch_ratings(session, page, page_size) if page <= total_pages else []
    logger.info(f"Ratings page {page} requested, {len(ratings)} of {total_records} entries returned")
    return RatingsPage(
        page=page,
        page_size=page_size,
        total_records=total_records,
        total_pages=total_pages,
        ratings=ratings,
        movies=movie_options(session),
        reviewers=reviewer_options(session),
    )
