from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from typing import Annotated, Literal, Optional

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class OtpSendEmail(BaseModel):
    email: Optional[str] = None


class OtpVerify(BaseModel):
    identifier: RequiredText
    otp: RequiredText
    type: RequiredText


class ContactCreate(BaseModel):
    name: RequiredText
    phone: RequiredText
    email: RequiredText
    subject: RequiredText
    message: RequiredText


class PatientRegister(CamelModel):
    first_name: RequiredText = Field(alias="firstName")
    last_name: RequiredText = Field(alias="lastName")
    email: RequiredText
    phone: RequiredText
    password: RequiredText
    dob: Optional[str] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    email_otp: Optional[str] = Field(default=None, alias="emailOtp")


class LoginIn(BaseModel):
    email: RequiredText
    password: RequiredText


class AppointmentCreate(CamelModel):
    department: RequiredText
    doctor: RequiredText
    appointment_date: RequiredText = Field(alias="appointmentDate")
    appointment_time: RequiredText = Field(alias="appointmentTime")
    consultation_type: RequiredText = Field(alias="consultationType")
    symptoms: Optional[str] = None


class AppointmentStatusUpdate(BaseModel):
    status: Literal["pending", "confirmed", "completed", "cancelled"]
