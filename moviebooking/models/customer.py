"""
Customer identity, owned by the customer service and only looked up here.
"""

from sqlalchemy import Column, Integer, String

from moviebooking.db.base import Base, TimestampMixin


class Customer(Base, TimestampMixin):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    mobile_number = Column(String(20), nullable=True)

    def __repr__(self) -> str:
        return f"<Customer(id={self.id}, email={self.email})>"
