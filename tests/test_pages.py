import pytest
from sqlmodel import create_engine

from ratings.database.db import get_session, open_session
from ratings.main import app
from conftest import movie, reviewer, rating


@pytest.mark.parametrize("marker, message", [
    ("rating_added", "Rating added successfully!"),
    ("movie_added", "Movie added successfully!"),
    ("reviewer_added", "Reviewer added successfully!"),
])
def test_success_marker_shows_banner(client, marker, message):
    response = client.get("/", params={"success": marker})

    assert response.status_code == 200
    assert message in response.text


def test_unknown_success_marker_shows_nothing(client):
    response = client.get("/", params={"success": "<b>hacked</b>"})

    assert "message success" not in response.text
    assert "hacked" not in response.text


def test_redirect_lands_on_listing_with_banner(client, seed):
    seed(movie(101), reviewer(201))

    response = client.post("/", data={"action": "add_rating", "reviewer_id": "201", "movie_id": "101", "stars": "4"})

    assert response.status_code == 200
    assert "Rating added successfully!" in response.text
    assert "(4/5)" in response.text


def test_stored_text_is_escaped(client, seed):
    seed(
        movie(101, title="<script>alert(1)</script>", director="<b>Bold</b>"),
        reviewer(201, name="Tom & \"Jerry\""),
    )
    seed(rating(201, 101, stars=2))

    response = client.get("/")

    assert "<script>alert(1)</script>" not in response.text
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in response.text
    assert "&lt;b&gt;Bold&lt;/b&gt;" in response.text
    assert "Tom &amp; &#34;Jerry&#34;" in response.text


def test_missing_director_and_date_have_placeholders(client, seed):
    seed(movie(101, director=None), reviewer(201))
    seed(rating(201, 101, stars=3))

    response = client.get("/")

    assert "Unknown" in response.text
    assert "No date" in response.text


def test_pagination_links(client, seed):
    seed(movie(101), reviewer(201))
    seed(*[rating(201, 101) for _ in range(25)])

    response = client.get("/", params={"page": "2"})

    assert '<a href="?page=1">&laquo; Previous</a>' in response.text
    assert '<span class="current">2</span>' in response.text
    assert '<a href="?page=3">3</a>' in response.text
    assert '<a href="?page=3">Next &raquo;</a>' in response.text
    assert "Showing page 2 of 3 (25 total ratings)" in response.text


@pytest.mark.parametrize("page", ["0", "-2", "abc"])
def test_invalid_page_falls_back_to_first(client, page):
    response = client.get("/", params={"page": page})

    assert response.status_code == 200
    assert "Showing page 1 of 0 (0 total ratings)" in response.text


def test_dropdowns_list_movies_and_reviewers(client, seed):
    seed(movie(101, title="Avatar"), reviewer(201, name="Elizabeth Thomas"))

    response = client.get("/")

    assert '<option value="101">Avatar</option>' in response.text
    assert '<option value="201">Elizabeth Thomas</option>' in response.text
    for stars in range(1, 6):
        assert f'<option value="{stars}">' in response.text


def test_connection_failure_is_plain_text(client, tmp_path):
    broken = create_engine(f"sqlite:///{tmp_path / 'missing' / 'ratings.db'}")

    def session_override():
        yield from open_session(broken)

    app.dependency_overrides[get_session] = session_override

    response = client.get("/")

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text.startswith("Connection failed:")


def test_huge_page_renders_empty_table(client, seed):
    seed(movie(101), reviewer(201))
    seed(rating(201, 101, stars=5))

    response = client.get("/", params={"page": str(10 ** 20)})

    assert response.status_code == 200
    assert "(5/5)" not in response.text
    assert f"Showing page {10 ** 20} of 1 (1 total ratings)" in response.text
    assert '<a href="?page=1">1</a>' in response.text


def test_entry_point_serves_the_app(monkeypatch):
    from ratings import __main__ as entry

    calls = {}
    monkeypatch.setattr(entry.uvicorn, "run", lambda app, **options: calls.update(app=app, **options))
    monkeypatch.delenv("HOST", raising=False)
    monkeypatch.setenv("PORT", "9001")

    entry.main()

    assert calls == {"app": "ratings.main:app", "host": "0.0.0.0", "port": 9001}
