from .ratings import Movie, Reviewer, Rating
from .listing import RatingRow, MovieOption, ReviewerOption, RatingsPage

__all__ = ["Movie", "Reviewer", "Rating", "RatingRow", "MovieOption", "ReviewerOption", "RatingsPage"]
