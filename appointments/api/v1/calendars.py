from dataclasses import dataclass

from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException, Query

from appointments.api.v1.schemas import (
    AvailabilityRuleSchema,
    BookingCreateSchema,
    BookingResponseSchema,
    BookingSchema,
    BookingStatusUpdateSchema,
    CalendarCreateSchema,
    CalendarDetailSchema,
    CalendarSchema,
    CalendarSummarySchema,
    CalendarUpdateSchema,
    DayAvailabilitySchema,
    RulesReplaceSchema,
)
from appointments.application.exceptions import NotFoundError, ShareIdExhaustedError, SlotUnavailableError
from appointments.application.use_cases.availability_window import AvailabilityWindowUseCase
from appointments.application.use_cases.booking import BookingRequest, BookingResult, BookingUseCase
from appointments.application.use_cases.manage_calendars import CalendarAdminUseCase
from appointments.domain.entities.availability_rule import AvailabilityRule
from appointments.wiring.dependencies import (
    get_availability_use_case,
    get_booking_use_case,
    get_calendar_admin_use_case,
)

router = APIRouter(prefix="/calendars")


@dataclass(frozen=True)
class Tenant:
    business_id: str
    user_id: str


def get_tenant(
    x_business_id: str | None = Header(None),
    x_user_id: str | None = Header(None),
) -> Tenant:
    if not x_business_id or not x_user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return Tenant(business_id=x_business_id, user_id=x_user_id)


def _booking_response(result: BookingResult) -> BookingResponseSchema:
    return BookingResponseSchema(
        booking=BookingSchema.model_validate(result.booking),
        availability=[DayAvailabilitySchema.model_validate(d) for d in result.availability],
    )


@router.get("", response_model=list[CalendarSummarySchema])
def list_calendars(
    days: int | None = Query(None, ge=1),
    tenant: Tenant = Depends(get_tenant),
    uc: AvailabilityWindowUseCase = Depends(get_availability_use_case),
):
    summaries = uc.calendar_summaries(tenant.business_id, days=days)
    return [CalendarSummarySchema.model_validate(s) for s in summaries]


@router.post("", response_model=CalendarSchema, status_code=201)
def create_calendar(
    req: CalendarCreateSchema,
    tenant: Tenant = Depends(get_tenant),
    uc: CalendarAdminUseCase = Depends(get_calendar_admin_use_case),
):
    fields = req.model_dump(exclude={"name"})
    try:
        calendar = uc.create_calendar(tenant.business_id, tenant.user_id, req.name, **fields)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ShareIdExhaustedError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return CalendarSchema.model_validate(calendar)


@router.get("/{calendar_id}", response_model=CalendarDetailSchema)
def get_calendar(
    calendar_id: str,
    tenant: Tenant = Depends(get_tenant),
    uc: CalendarAdminUseCase = Depends(get_calendar_admin_use_case),
):
    try:
        calendar, rules = uc.get_calendar(tenant.business_id, calendar_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return CalendarDetailSchema(
        calendar=CalendarSchema.model_validate(calendar),
        rules=[AvailabilityRuleSchema.model_validate(r) for r in rules],
    )


@router.patch("/{calendar_id}", response_model=CalendarSchema)
def update_calendar(
    calendar_id: str,
    req: CalendarUpdateSchema,
    tenant: Tenant = Depends(get_tenant),
    uc: CalendarAdminUseCase = Depends(get_calendar_admin_use_case),
):
    try:
        calendar = uc.update_calendar(tenant.business_id, calendar_id, req.model_dump(exclude_unset=True))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return CalendarSchema.model_validate(calendar)


@router.delete("/{calendar_id}", response_model=CalendarSchema)
def deactivate_calendar(
    calendar_id: str,
    tenant: Tenant = Depends(get_tenant),
    uc: CalendarAdminUseCase = Depends(get_calendar_admin_use_case),
):
    try:
        calendar = uc.deactivate_calendar(tenant.business_id, calendar_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return CalendarSchema.model_validate(calendar)


@router.put("/{calendar_id}/rules", response_model=list[AvailabilityRuleSchema])
def replace_rules(
    calendar_id: str,
    req: RulesReplaceSchema,
    tenant: Tenant = Depends(get_tenant),
    uc: CalendarAdminUseCase = Depends(get_calendar_admin_use_case),
):
    rules = [
        AvailabilityRule(
            rule_type=r.rule_type,
            day_of_week=r.day_of_week,
            specific_date=r.specific_date,
            start_minutes=r.start_minutes,
            end_minutes=r.end_minutes,
            is_unavailable=r.is_unavailable,
        )
        for r in req.rules
    ]
    try:
        saved = uc.replace_rules(tenant.business_id, calendar_id, rules)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return [AvailabilityRuleSchema.model_validate(r) for r in saved]


@router.get("/{calendar_id}/bookings", response_model=list[BookingSchema])
def list_bookings(
    calendar_id: str,
    include_cancelled: bool = Query(True),
    tenant: Tenant = Depends(get_tenant),
    uc: CalendarAdminUseCase = Depends(get_calendar_admin_use_case),
):
    try:
        bookings = uc.list_bookings(tenant.business_id, calendar_id, include_cancelled=include_cancelled)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return [BookingSchema.model_validate(b) for b in bookings]


@router.post("/{calendar_id}/bookings", response_model=BookingResponseSchema, status_code=201)
def create_booking(
    calendar_id: str,
    req: BookingCreateSchema,
    background_tasks: BackgroundTasks,
    tenant: Tenant = Depends(get_tenant),
    uc: BookingUseCase = Depends(get_booking_use_case),
):
    request = BookingRequest(
        guest_name=req.guest_name,
        guest_email=req.guest_email,
        slot_start=req.slot_start,
        slot_end=req.slot_end,
        guest_timezone=req.guest_timezone,
        guest_notes=req.guest_notes,
    )
    try:
        result = uc.reserve_for_calendar(
            tenant.business_id,
            calendar_id,
            request,
            created_by_user_id=tenant.user_id,
            schedule=background_tasks.add_task,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SlotUnavailableError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _booking_response(result)


@router.post("/{calendar_id}/bookings/complete-elapsed", response_model=list[BookingSchema])
def complete_elapsed_bookings(
    calendar_id: str,
    tenant: Tenant = Depends(get_tenant),
    uc: BookingUseCase = Depends(get_booking_use_case),
):
    try:
        completed = uc.complete_elapsed(tenant.business_id, calendar_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return [BookingSchema.model_validate(b) for b in completed]


@router.patch("/{calendar_id}/bookings/{booking_id}", response_model=BookingResponseSchema)
def update_booking_status(
    calendar_id: str,
    booking_id: str,
    req: BookingStatusUpdateSchema,
    background_tasks: BackgroundTasks,
    tenant: Tenant = Depends(get_tenant),
    uc: BookingUseCase = Depends(get_booking_use_case),
):
    try:
        result = uc.change_status(
            tenant.business_id,
            calendar_id,
            booking_id,
            req.status,
            reason=req.reason,
            schedule=background_tasks.add_task,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _booking_response(result)
