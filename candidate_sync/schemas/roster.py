import re
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, field_validator

from candidate_sync.schemas.candidates import natural_key

EMAIL_RE = re.compile(r"^[a-z0-9._%+-]+@[a-z0-9.-]+\.[a-z]{2,}$")
PHONE_RE = re.compile(r"^\d{8,15}$")

STORE_FIELDS = ("name", "email", "phone_number", "job_role_admin", "datetime")


class RosterEntry(BaseModel):
    """A roster row. Serialization aliases are the roster store's column labels."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(default="", serialization_alias="Name")
    email: str = Field(default="", serialization_alias="Email")
    phone_number: str = Field(default="", serialization_alias="Phone Number")
    job_role_admin: str = Field(default="", serialization_alias="Job Role Admin")
    datetime: str = Field(default="", serialization_alias="Datetime")
    interview_status: str = Field(default="", serialization_alias="Interview Status")
    interview_scheduled: str = Field(default="", serialization_alias="Interview Scheduled")
    interview_date: str = Field(default="", serialization_alias="Interview Date")

    @property
    def status(self) -> str:
        if self.interview_status or self.interview_scheduled or self.interview_date:
            return "Completed"
        return "Pending"

    @property
    def key(self) -> tuple[str, str]:
        return natural_key(self.name, self.email)

    def to_record(self) -> dict[str, str]:
        """Flat record in the shape the roster store writes."""
        return self.model_dump(by_alias=True, include=set(STORE_FIELDS))


class RosterEntryIn(BaseModel):
    name: str
    email: str
    phone_number: str
    job_role_admin: str

    @field_validator("name")
    @classmethod
    def require_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        v = v.strip().lower()
        if re.search(r"\s", v):
            raise ValueError("Email must not contain spaces")
        if "@" not in v:
            raise ValueError("Email must include '@'")
        if not EMAIL_RE.match(v):
            raise ValueError("Enter a valid email address")
        return v

    @field_validator("phone_number")
    @classmethod
    def normalise_phone(cls, v: str) -> str:
        v = v.strip()
        if not v.isdigit() or not v.isascii():
            raise ValueError("Phone must be numeric only")
        if not PHONE_RE.match(v):
            raise ValueError("Phone must be 8-15 digits (with country code)")
        return v

    @field_validator("job_role_admin")
    @classmethod
    def require_job_role(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Job Role Admin is required")
        return v

    def to_entry(self, timestamp: str) -> RosterEntry:
        return RosterEntry(
            name=self.name,
            email=self.email,
            phone_number=self.phone_number,
            job_role_admin=self.job_role_admin,
            datetime=timestamp,
        )


class RosterKeyIn(BaseModel):
    name: str
    email: str


class RosterUpdateRequest(BaseModel):
    key: RosterKeyIn
    entry: RosterEntryIn


class RosterEntryOut(BaseModel):
    name: str
    email: str
    phone_number: str
    job_role_admin: str
    datetime: str
    status: str


class RosterStatsOut(BaseModel):
    total: int
    interviewed: int
    pending: int


class RosterWriteOut(BaseModel):
    success: bool
    message: str | None = None


@dataclass(slots=True, frozen=True)
class RosterKey:
    name: str
    email: str

    def to_wire(self) -> dict[str, str]:
        return {"keyName": self.name, "keyEmail": self.email}


@dataclass(slots=True)
class RosterWriteResult:
    success: bool
    message: str | None = None
