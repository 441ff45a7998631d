from pydantic import BaseModel
from typing import List, Optional
from datetime import date


class RatingRow(BaseModel):
    title: str
    year: int
    director: Optional[str] = None
    reviewer_name: str
    stars: int
    rating_date: Optional[date] = None


class MovieOption(BaseModel):
    id: int
    title: str


class ReviewerOption(BaseModel):
    id: int
    name: str


class RatingsPage(BaseModel):
    page: int
    page_size: int
    total_records: int
    total_pages: int
    ratings: List[RatingRow]
    movies: List[MovieOption]
    reviewers: List[ReviewerOption]

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages
