from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from clinic.api.common import datastore_guard
from clinic.db.session import get_db
from clinic.models.contact import Contact
from clinic.schemas.public import ContactCreate

router = APIRouter()


@router.post("")
def submit_contact(payload: ContactCreate, db: Session = Depends(get_db)):
    with datastore_guard(db, "Failed to submit contact form"):
        row = Contact(
            name=payload.name,
            phone=payload.phone,
            email=payload.email,
            subject=payload.subject,
            message=payload.message,
        )
        db.add(row)
        db.commit()
        db.refresh(row)
    return {"success": True, "message": "Contact form submitted successfully", "id": row.id}
