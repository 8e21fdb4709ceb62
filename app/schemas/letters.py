import uuid
from datetime import datetime, date
from typing import Optional, Dict, Any
from enum import Enum

from pydantic import BaseModel, Field


class LetterStatus(str, Enum):
    draft = "draft"
    processed = "processed"
    sent = "sent"
    archived = "archived"


class SignatureStatus(str, Enum):
    pending = "pending"
    signed = "signed"
    declined = "declined"


class ReminderFrequency(str, Enum):
    none = "none"
    daily = "daily"
    weekly = "weekly"


# Letter Schemas
class LetterBase(BaseModel):
    title: str = Field(min_length=1)
    template_content: str = Field(min_length=1)
    employee_id: Optional[int] = None
    letter_type: str


class LetterCreate(LetterBase):
    pass


class LetterUpdate(BaseModel):
    title: Optional[str] = None
    template_content: Optional[str] = None
    employee_id: Optional[int] = None
    letter_type: Optional[str] = None
    status: Optional[LetterStatus] = None


class LetterResponse(LetterBase):
    id: int
    processed_content: Optional[str] = None
    status: LetterStatus
    placeholders: Optional[Dict[str, Any]] = None
    created_by: Optional[uuid.UUID] = None
    processed_at: Optional[datetime] = None
    sent_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Signature Request Schemas
class SignatureRequestCreate(BaseModel):
    employee_id: int
    document_type: str
    document_id: int
    template_id: Optional[int] = None
    title: str = Field(min_length=1)
    description: Optional[str] = None
    due_date: Optional[date] = None
    email_notification: bool = True
    reminder_frequency: ReminderFrequency = ReminderFrequency.none


class SignAction(BaseModel):
    signature_data: str = Field(min_length=1)
    signed_by: str = Field(min_length=1)


class DeclineAction(BaseModel):
    notes: Optional[str] = None


class SignatureRequestResponse(SignatureRequestCreate):
    id: int
    status: SignatureStatus
    signed_by: Optional[str] = None
    signed_at: Optional[datetime] = None
    declined_at: Optional[datetime] = None
    notes: Optional[str] = None
    reminder_count: int = 0
    last_reminder_at: Optional[datetime] = None
    requested_by: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
