from fastapi import APIRouter
from clinic.api.admin import auth, doctors, records

router = APIRouter()
router.include_router(auth.router, tags=["AdminAuth"])
router.include_router(records.router, tags=["AdminRecords"])
router.include_router(doctors.router, prefix="/doctors", tags=["AdminDoctors"])
