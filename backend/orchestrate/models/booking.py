from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum, Text, Boolean, Index
from sqlalchemy.orm import relationship
from datetime import datetime
import enum
from orchestrate.database import Base


# Cancelling a booking deletes its row
class BookingStatus(str, enum.Enum):
    CONFIRMED = "confirmed"


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        Index("ix_bookings_room_interval", "room_id", "start_time", "end_time"),
    )

    id = Column(Integer, primary_key=True, index=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    attendees = Column(Text)  # free-form list as typed by the booker
    status = Column(Enum(BookingStatus), default=BookingStatus.CONFIRMED, nullable=False)

    # Exactly one of user_id (internal) or guest_* (external) is populated
    is_external = Column(Boolean, default=False, nullable=False)
    guest_name = Column(String(255))
    guest_email = Column(String(255))

    room_id = Column(Integer, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    room = relationship("Room", back_populates="bookings")
    user = relationship("User", back_populates="bookings")
