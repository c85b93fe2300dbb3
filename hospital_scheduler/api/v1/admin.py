from fastapi import APIRouter, Depends, status

from ...api.deps import get_current_session
from ...schemas.appointment import (
    AppointmentCancel, AppointmentReschedule, AppointmentResponse, BackupResponse,
    DoctorCreate, DoctorResponse, EmergencyDutyResponse, PatientCreate,
    PatientResponse, ReportResponse
)
from ...services.session import Session

router = APIRouter(prefix="/admin", tags=["Admin"])

@router.post("/doctors", response_model=DoctorResponse, status_code=status.HTTP_201_CREATED)
async def add_doctor(
    doctor_data: DoctorCreate,
    session: Session = Depends(get_current_session)
):
    """Register a new doctor."""
    doctor = session.add_doctor(
        doctor_data.user_id,
        doctor_data.name,
        doctor_data.password,
        doctor_data.specialization
    )
    return DoctorResponse.model_validate(doctor)

@router.post("/patients", response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
async def add_patient(
    patient_data: PatientCreate,
    session: Session = Depends(get_current_session)
):
    """Register a new patient."""
    patient = session.add_patient(
        patient_data.user_id,
        patient_data.name,
        patient_data.password,
        patient_data.medical_history
    )
    return PatientResponse.model_validate(patient)

@router.get("/report", response_model=ReportResponse)
async def generate_report(session: Session = Depends(get_current_session)):
    """System-wide counts of users and appointments."""
    return ReportResponse.model_validate(session.generate_report())

@router.post("/doctors/{doctor_id}/emergency-duty", response_model=EmergencyDutyResponse)
async def emergency_override(
    doctor_id: str,
    session: Session = Depends(get_current_session)
):
    """Put any doctor on emergency duty."""
    cancelled = session.mark_emergency_duty(doctor_id)
    return EmergencyDutyResponse(doctor_id=doctor_id, cancelled_count=cancelled)

@router.post("/appointments/{appt_id}/cancel", response_model=AppointmentResponse)
async def cancel_appointment(
    appt_id: str,
    cancel_data: AppointmentCancel,
    session: Session = Depends(get_current_session)
):
    """Cancel any scheduled appointment with an optional note."""
    return AppointmentResponse.model_validate(
        session.cancel_appointment(appt_id, cancel_data.note)
    )

@router.post("/appointments/{appt_id}/reschedule", response_model=AppointmentResponse)
async def reschedule_appointment(
    appt_id: str,
    reschedule: AppointmentReschedule,
    session: Session = Depends(get_current_session)
):
    return AppointmentResponse.model_validate(
        session.reschedule(appt_id, reschedule.date_time)
    )

@router.post("/backup", response_model=BackupResponse)
async def backup(session: Session = Depends(get_current_session)):
    """Copy data files and the audit log into a timestamped backup directory."""
    return BackupResponse(backup_dir=str(session.backup()))
