"""
Watch Diary — SQLAlchemy Models
"""

from sqlalchemy import Column, Integer, String, DateTime
from watchdiary.database import Base


class WatchedMovie(Base):
    __tablename__ = "watched_movies"

    # Insertion order is the watchlist order
    seq = Column(Integer, primary_key=True, autoincrement=True)
    movie_id = Column(String(64), unique=True, nullable=False, index=True)
    title = Column(String(500), nullable=False)
    image = Column(String(1000), nullable=False, default="")
    year = Column(String(16), nullable=False, default="N/A")
    date_added = Column(DateTime(timezone=True))
