from datetime import datetime

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query

from appointments.api.v1.schemas import (
    BookingCreateSchema,
    BookingResponseSchema,
    BookingSchema,
    DayAvailabilitySchema,
    PublicAvailabilityResponseSchema,
    PublicCalendarSchema,
)
from appointments.application.exceptions import CalendarNotFoundError, SlotUnavailableError
from appointments.application.use_cases.availability_window import AvailabilityWindowUseCase
from appointments.application.use_cases.booking import BookingRequest, BookingUseCase
from appointments.wiring.dependencies import get_availability_use_case, get_booking_use_case

router = APIRouter(prefix="/public")


@router.get("/{share_id}/availability", response_model=PublicAvailabilityResponseSchema)
def public_availability(
    share_id: str,
    start: datetime | None = Query(None),
    end: datetime | None = Query(None),
    uc: AvailabilityWindowUseCase = Depends(get_availability_use_case),
):
    try:
        calendar, days = uc.get_public_availability(share_id, start=start, end=end)
    except CalendarNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return PublicAvailabilityResponseSchema(
        calendar=PublicCalendarSchema.model_validate(calendar),
        availability=[DayAvailabilitySchema.model_validate(d) for d in days],
    )


@router.post("/{share_id}/bookings", response_model=BookingResponseSchema)
def create_public_booking(
    share_id: str,
    req: BookingCreateSchema,
    background_tasks: BackgroundTasks,
    uc: BookingUseCase = Depends(get_booking_use_case),
):
    try:
        result = uc.reserve(
            share_id,
            BookingRequest(
                guest_name=req.guest_name,
                guest_email=req.guest_email,
                slot_start=req.slot_start,
                slot_end=req.slot_end,
                guest_timezone=req.guest_timezone,
                guest_notes=req.guest_notes,
            ),
            schedule=background_tasks.add_task,
        )
    except CalendarNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SlotUnavailableError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return BookingResponseSchema(
        booking=BookingSchema.model_validate(result.booking),
        availability=[DayAvailabilitySchema.model_validate(d) for d in result.availability],
    )
