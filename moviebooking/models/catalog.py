"""
Catalog records: movies, theatres, screens and scheduled shows.

These rows are managed by the catalog service; the booking engine only
reads them (see services/catalog_service.py).
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index

from moviebooking.db.base import Base, TimestampMixin


class Movie(Base, TimestampMixin):
    __tablename__ = "movies"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    genre = Column(String(100), nullable=True)
    language = Column(String(100), nullable=True)
    duration = Column(String(50), nullable=True)
    description = Column(String(1000), nullable=True)
    image_url = Column(String(500), nullable=True)

    def __repr__(self) -> str:
        return f"<Movie(id={self.id}, name={self.name})>"


class Theatre(Base, TimestampMixin):
    __tablename__ = "theatres"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    city = Column(String(100), nullable=True)

    def __repr__(self) -> str:
        return f"<Theatre(id={self.id}, name={self.name}, city={self.city})>"


class Screen(Base, TimestampMixin):
    __tablename__ = "screens"

    id = Column(Integer, primary_key=True, index=True)
    theatre_id = Column(Integer, ForeignKey("theatres.id"), nullable=True, index=True)
    name = Column(String(100), nullable=False)
    rows = Column(Integer, nullable=True)
    columns = Column(Integer, nullable=True)

    def __repr__(self) -> str:
        return f"<Screen(id={self.id}, name={self.name}, theatre={self.theatre_id})>"


class Show(Base, TimestampMixin):
    __tablename__ = "shows"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=True)
    start_time = Column(DateTime, nullable=True)
    end_time = Column(DateTime, nullable=True)
    # Plain integer references: the catalog owns integrity of these ids,
    # and a vanished screen or theatre must not break booking history.
    screen_id = Column(Integer, nullable=True)
    theatre_id = Column(Integer, nullable=True)
    movie_id = Column(Integer, nullable=True, index=True)

    __table_args__ = (
        Index("ix_shows_start_time", "start_time"),
    )

    def __repr__(self) -> str:
        return f"<Show(id={self.id}, movie={self.movie_id}, start={self.start_time})>"
