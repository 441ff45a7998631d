from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import date

MIN_YEAR = 1888
MAX_YEAR = 2030
MIN_STARS = 1
MAX_STARS = 5
MAX_TEXT_LENGTH = 255
MAX_ID = 2 ** 31 - 1


class Movie(SQLModel, table=True):
    id: int = Field(primary_key=True, sa_column_kwargs={"autoincrement": False})  # mID
    title: str = Field(index=True, max_length=MAX_TEXT_LENGTH)
    year: int = Field(ge=MIN_YEAR, le=MAX_YEAR)
    director: Optional[str] = Field(default=None, max_length=MAX_TEXT_LENGTH)


class Reviewer(SQLModel, table=True):
    id: int = Field(primary_key=True, sa_column_kwargs={"autoincrement": False})  # rID
    name: str = Field(index=True, max_length=MAX_TEXT_LENGTH)


class Rating(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    reviewer_id: int = Field(foreign_key="reviewer.id", index=True)
    movie_id: int = Field(foreign_key="movie.id", index=True)
    stars: int = Field(ge=MIN_STARS, le=MAX_STARS)
    rating_date: Optional[date] = Field(default=None, index=True)
