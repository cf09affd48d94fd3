"""
SQLAlchemy Database Models

Mappings for the four tables the ordering API reads and writes:
- food_items: menu catalog (read-only here)
- tables: physical restaurant tables and their QR tokens (read-only here)
- orders: dine-in orders placed from a table
- requests: assistance calls from a table
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, Text, ForeignKey
from sqlalchemy.sql import func

from tableside.database import Base


class FoodItem(Base):
    """
    Menu entry.

    Only rows with `published_at` set are visible to guests.
    """
    __tablename__ = "food_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    price = Column(Float, nullable=True, default=0.0)
    type = Column(String(50), nullable=True, index=True)
    image = Column(String(500), nullable=True)
    published_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<FoodItem #{self.id} - {self.name} - {self.type}>"


class RestaurantTable(Base):
    """
    Physical table on the floor.

    Guests reach it either through the token printed in its QR code or
    through its table number.
    """
    __tablename__ = "tables"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    table_number = Column(String(20), nullable=False, unique=True, index=True)
    qr_code_image = Column(String(255), nullable=True, unique=True, index=True)
    seats = Column(Integer, nullable=True)
    location = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def to_dict(self) -> dict:
        """Every stored column, keyed by column name."""
        return {column.name: getattr(self, column.key) for column in self.__table__.columns}

    def __repr__(self):
        return f"<RestaurantTable {self.table_number}>"


class Order(Base):
    """
    Dine-in order placed from a table.

    `items` holds the ordered lines as a JSON string and is never rewritten
    after creation; only `status` changes afterwards.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    table_number = Column(
        String(20),
        ForeignKey("tables.table_number"),
        nullable=False,
        index=True
    )
    items = Column(Text, nullable=False)  # JSON string of ordered items
    total_amount = Column(Float, nullable=False)
    total_price = Column(Float, nullable=False)
    payment_method = Column(String(50), nullable=True)  # card, cash, etc.
    order_date = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(50), nullable=False, default="waiting", index=True)

    def __repr__(self):
        return f"<Order #{self.id} - table {self.table_number} - {self.status}>"


class ServiceRequest(Base):
    """Assistance request raised from a table (napkins, water, the bill...)."""
    __tablename__ = "requests"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    table_number = Column(String(20), nullable=True, index=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<ServiceRequest #{self.id} - table {self.table_number}>"
