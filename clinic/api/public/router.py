from fastapi import APIRouter
from clinic.api.public import appointments, contact, doctors, otp, patients

router = APIRouter()
router.include_router(otp.router, prefix="/otp", tags=["OTP"])
router.include_router(contact.router, prefix="/contact", tags=["Contact"])
router.include_router(patients.router, prefix="/patients", tags=["Patients"])
router.include_router(doctors.router, prefix="/doctors", tags=["Doctors"])
router.include_router(appointments.router, tags=["Appointments"])
