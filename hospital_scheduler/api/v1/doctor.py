from fastapi import APIRouter, Depends
from typing import List

from ...api.deps import get_current_session
from ...schemas.appointment import (
    AppointmentResponse, AvailabilityResponse, AvailabilityUpdate,
    EmergencyDutyResponse, PatientHistoryResponse
)
from ...services.session import Session

router = APIRouter(prefix="/doctor", tags=["Doctor"])

@router.get("/appointments", response_model=List[AppointmentResponse])
async def view_appointments(session: Session = Depends(get_current_session)):
    """All appointments of the current doctor."""
    return [AppointmentResponse.model_validate(a) for a in session.view_appointments()]

@router.post("/availability", response_model=AvailabilityResponse)
async def update_availability(
    availability: AvailabilityUpdate,
    session: Session = Depends(get_current_session)
):
    """Add an available slot."""
    return AvailabilityResponse(available_slots=session.update_availability(availability.slot))

@router.post("/emergency-duty", response_model=EmergencyDutyResponse)
async def mark_emergency_duty(session: Session = Depends(get_current_session)):
    """Go on emergency duty, cancelling today's non-emergency appointments."""
    cancelled = session.mark_emergency_duty()
    return EmergencyDutyResponse(
        doctor_id=session.identity.user_id,
        cancelled_count=cancelled
    )

@router.get("/patients/{patient_id}/history", response_model=PatientHistoryResponse)
async def view_patient_history(
    patient_id: str,
    session: Session = Depends(get_current_session)
):
    return PatientHistoryResponse(
        patient_id=patient_id,
        medical_history=session.view_patient_history(patient_id)
    )

@router.post("/appointments/{appt_id}/complete", response_model=AppointmentResponse)
async def complete_appointment(
    appt_id: str,
    session: Session = Depends(get_current_session)
):
    return AppointmentResponse.model_validate(session.complete_appointment(appt_id))
