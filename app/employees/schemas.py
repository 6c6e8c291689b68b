from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import EmailStr, Field, ValidationInfo, field_validator

from app.core.schemas import CamelModel
from app.core.validators import (
    normalize_email,
    validate_phone,
    validate_past_date,
    validate_not_future,
    validate_date_order
)


class Department(str, Enum):
    ENGINEERING = "Engineering"
    MARKETING = "Marketing"
    SALES = "Sales"
    HR = "HR"
    FINANCE = "Finance"
    OPERATIONS = "Operations"
    CUSTOMER_SUPPORT = "Customer Support"
    LEGAL = "Legal"


class Level(str, Enum):
    ENTRY = "Entry"
    JUNIOR = "Junior"
    MID = "Mid"
    SENIOR = "Senior"
    LEAD = "Lead"
    MANAGER = "Manager"
    DIRECTOR = "Director"
    EXECUTIVE = "Executive"


class EmploymentType(str, Enum):
    FULL_TIME = "Full-time"
    PART_TIME = "Part-time"
    CONTRACT = "Contract"
    INTERN = "Intern"


class EmploymentStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    ON_LEAVE = "On Leave"
    TERMINATED = "Terminated"


class PayFrequency(str, Enum):
    WEEKLY = "Weekly"
    BI_WEEKLY = "Bi-weekly"
    MONTHLY = "Monthly"
    ANNUALLY = "Annually"


class GoalStatus(str, Enum):
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class DocumentType(str, Enum):
    CONTRACT = "Contract"
    ID = "ID"
    RESUME = "Resume"
    CERTIFICATE = "Certificate"
    OTHER = "Other"


class Address(CamelModel):
    street: Optional[str] = Field(None, max_length=200)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    zip_code: Optional[str] = Field(None, max_length=20)
    country: Optional[str] = Field(None, max_length=100)


class PersonalInfoBase(CamelModel):
    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=50)
    email: str
    phone: str
    date_of_birth: date
    address: Optional[Address] = None


class PersonalInfo(PersonalInfoBase):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value: str) -> str:
        return validate_phone(value)

    @field_validator("date_of_birth")
    @classmethod
    def check_date_of_birth(cls, value: date) -> date:
        return validate_past_date(value, "Date of birth")


class EmploymentBase(CamelModel):
    department: Department
    position: str = Field(..., min_length=2, max_length=100)
    level: Optional[Level] = None
    start_date: date
    end_date: Optional[date] = None
    employment_type: EmploymentType = EmploymentType.FULL_TIME
    status: EmploymentStatus = EmploymentStatus.ACTIVE


class EmploymentInfo(EmploymentBase):
    manager: Optional[str] = None

    @field_validator("start_date")
    @classmethod
    def check_start_date(cls, value: date) -> date:
        return validate_not_future(value, "Start date")

    @field_validator("end_date")
    @classmethod
    def check_end_date(cls, value: Optional[date], info: ValidationInfo) -> Optional[date]:
        # start_date is missing from info.data when it failed its own checks
        start_date = info.data.get("start_date")
        if start_date is None:
            return value
        return validate_date_order(start_date, value)


class Benefits(CamelModel):
    health_insurance: bool = False
    dental_insurance: bool = False
    vision_insurance: bool = False
    retirement_plan: bool = False
    paid_time_off: int = Field(0, ge=0)


class Compensation(CamelModel):
    salary: float = Field(..., ge=0)
    currency: str = Field("USD", min_length=3, max_length=3)
    pay_frequency: PayFrequency = PayFrequency.MONTHLY
    benefits: Benefits = Field(default_factory=Benefits)


class Goal(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    target_date: Optional[date] = None
    status: GoalStatus = GoalStatus.NOT_STARTED


class Performance(CamelModel):
    rating: Optional[float] = Field(None, ge=1, le=5)
    last_review_date: Optional[date] = None
    goals: List[Goal] = Field(default_factory=list)


class Document(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    type: DocumentType = DocumentType.OTHER
    url: str = Field(..., min_length=1)
    uploaded_at: Optional[datetime] = None


class EmployeeCreate(CamelModel):
    """Full employee payload; update payloads are merged and validated against it too."""

    personal_info: PersonalInfo
    employment: EmploymentInfo
    compensation: Compensation
    performance: Performance = Field(default_factory=Performance)
    documents: List[Document] = Field(default_factory=list)


class ManagerSummary(CamelModel):
    id: str
    employee_id: str
    first_name: str
    last_name: str
    full_name: str
    email: str
    position: str


class EmploymentResponse(EmploymentBase):
    manager: Optional[ManagerSummary] = None


class EmployeeResponse(CamelModel):
    id: str
    employee_id: str
    personal_info: PersonalInfoBase
    employment: EmploymentResponse
    compensation: Compensation
    performance: Performance
    documents: List[Document]
    is_active: bool
    full_name: str
    years_of_service: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_employee(cls, employee) -> "EmployeeResponse":
        payload = employee.to_payload()
        manager = employee.manager
        payload["employment"]["manager"] = (
            ManagerSummary.model_validate(manager) if manager is not None else None
        )
        return cls.model_validate({
            "id": employee.id,
            "employeeId": employee.employee_id,
            **payload,
            "isActive": employee.is_active,
            "fullName": employee.full_name,
            "yearsOfService": employee.years_of_service,
            "createdAt": employee.created_at,
            "updatedAt": employee.updated_at,
        })


class Pagination(CamelModel):
    current_page: int
    total_pages: int
    total_employees: int
    limit: int
    has_next_page: bool
    has_prev_page: bool


class EmployeeListResponse(CamelModel):
    employees: List[EmployeeResponse]
    pagination: Pagination
