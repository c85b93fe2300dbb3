from fastapi import APIRouter, Depends, status

from ...api.deps import get_current_session
from ...schemas.appointment import (
    AppointmentBook, AppointmentReschedule, AppointmentResponse,
    BookingResponse, RecordsResponse
)
from ...services.session import Session

router = APIRouter(prefix="/patient", tags=["Patient"])

@router.post("/appointments", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    booking: AppointmentBook,
    session: Session = Depends(get_current_session)
):
    """Book an appointment with a doctor."""
    appt_id = session.book(booking.doctor_id, booking.date_time)
    return BookingResponse(appt_id=appt_id)

@router.post("/appointments/{appt_id}/cancel", response_model=AppointmentResponse)
async def cancel_appointment(
    appt_id: str,
    session: Session = Depends(get_current_session)
):
    """Cancel one of the patient's scheduled appointments."""
    return AppointmentResponse.model_validate(session.cancel(appt_id))

@router.post("/appointments/{appt_id}/reschedule", response_model=AppointmentResponse)
async def reschedule_appointment(
    appt_id: str,
    reschedule: AppointmentReschedule,
    session: Session = Depends(get_current_session)
):
    """Move an appointment to a new slot with the same doctor."""
    return AppointmentResponse.model_validate(
        session.reschedule(appt_id, reschedule.date_time)
    )

@router.get("/records", response_model=RecordsResponse)
async def view_records(session: Session = Depends(get_current_session)):
    """Medical history and appointments of the current patient."""
    records = session.view_records()
    return RecordsResponse(
        medical_history=records.medical_history,
        appointments=[AppointmentResponse.model_validate(a) for a in records.appointments]
    )

@router.post("/emergency", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def request_emergency(session: Session = Depends(get_current_session)):
    """Request an emergency appointment with the first doctor on emergency duty."""
    return BookingResponse(appt_id=session.request_emergency())
