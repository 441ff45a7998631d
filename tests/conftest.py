import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from datetime import date
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from ratings.database.db import get_session, open_session
from ratings.main import app
from ratings.models import Movie, Reviewer, Rating


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    def session_override():
        yield from open_session(engine)

    app.dependency_overrides[get_session] = session_override
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seed(session):
    def add(*rows):
        for row in rows:
            session.add(row)
        session.commit()
    return add


def movie(id, title="Star Wars", year=1977, director="George Lucas"):
    return Movie(id=id, title=title, year=year, director=director)


def reviewer(id, name="Sarah Martinez"):
    return Reviewer(id=id, name=name)


def rating(reviewer_id, movie_id, stars=4, rating_date=None):
    if isinstance(rating_date, str):
        rating_date = date.fromisoformat(rating_date)
    return Rating(reviewer_id=reviewer_id, movie_id=movie_id, stars=stars, rating_date=rating_date)
