from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class CalendarRow(Base):
    __tablename__ = "appointment_calendars"

    id = Column(String(36), primary_key=True)
    business_id = Column(String(36), nullable=False, index=True)
    owner_user_id = Column(String(36), nullable=False)
    owner_email = Column(String, nullable=True)

    name = Column(String, nullable=False)
    appointment_type = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    location_type = Column(String, nullable=False, default="virtual")  # in_person, virtual, phone, custom
    location_details = Column(Text, nullable=True)
    virtual_meeting_preference = Column(String, nullable=True)

    duration_minutes = Column(Integer, nullable=False, default=30)
    buffer_before_minutes = Column(Integer, nullable=False, default=0)
    buffer_after_minutes = Column(Integer, nullable=False, default=0)
    timezone = Column(String, nullable=False, default="UTC")
    share_id = Column(String(12), nullable=False, unique=True)
    booking_window_days = Column(Integer, nullable=False, default=30)
    min_schedule_notice_minutes = Column(Integer, nullable=False, default=0)

    status = Column(String, nullable=False, default="active")  # active, inactive
    requires_confirmation = Column(Boolean, nullable=False, default=False)
    google_calendar_sync = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class AvailabilityRuleRow(Base):
    __tablename__ = "appointment_availability_rules"

    id = Column(String(36), primary_key=True)
    calendar_id = Column(String(36), ForeignKey("appointment_calendars.id", ondelete="CASCADE"), nullable=False, index=True)

    rule_type = Column(String, nullable=False)  # weekly, date
    day_of_week = Column(Integer, nullable=True)  # 0=Sunday, 6=Saturday
    specific_date = Column(Date, nullable=True)
    start_minutes = Column(Integer, nullable=False)
    end_minutes = Column(Integer, nullable=False)
    is_unavailable = Column(Boolean, nullable=False, default=False)


class BookingRow(Base):
    __tablename__ = "appointment_bookings"
    __table_args__ = (Index("ix_appointment_bookings_calendar_span", "calendar_id", "start_time", "end_time"),)

    id = Column(String(36), primary_key=True)
    calendar_id = Column(String(36), ForeignKey("appointment_calendars.id"), nullable=False)
    share_id = Column(String(12), nullable=False, unique=True)
    created_by_user_id = Column(String(36), nullable=True)

    # Guest info
    guest_name = Column(String, nullable=False)
    guest_email = Column(String, nullable=False)
    guest_timezone = Column(String, nullable=True)
    guest_notes = Column(Text, nullable=True)

    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    status = Column(String, nullable=False, default="scheduled")  # pending, scheduled, cancelled, completed

    meeting_url = Column(String, nullable=True)
    meeting_location = Column(String, nullable=True)

    # External calendar sync
    external_event_id = Column(String, nullable=True)
    external_calendar = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
