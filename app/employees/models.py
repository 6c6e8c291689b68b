import math
from datetime import date
from typing import Any, Dict, Optional

from sqlalchemy import Column, String, Boolean, Date, DateTime, ForeignKey, Float, Index, JSON, text
from sqlalchemy.orm import relationship
from app.core.database import Base, generate_uuid
from app.core.datetime_utils import utcnow

DAYS_PER_YEAR = 365.25


def compose_full_name(first_name: Optional[str], last_name: Optional[str]) -> str:
    return " ".join(part for part in (first_name, last_name) if part)


def calculate_years_of_service(start_date: Optional[date], end_date: Optional[date] = None, today: Optional[date] = None) -> float:
    """Years between start and end (or today), floored to 2 decimals and never negative."""
    if start_date is None:
        return 0.0
    end = end_date or today or date.today()
    years = (end - start_date).days / DAYS_PER_YEAR
    if years <= 0:
        return 0.0
    return math.floor(years * 100) / 100


def format_employee_id(sequence: int) -> str:
    return f"EMP{sequence:04d}"


class Employee(Base):
    __tablename__ = "employees"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    employee_id = Column(String(20), unique=True, nullable=False, index=True)

    # Personal info
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(20), nullable=False)
    date_of_birth = Column(Date, nullable=False)
    address = Column(JSON)

    # Employment info
    department = Column(String(50), nullable=False, index=True)
    position = Column(String(100), nullable=False)
    level = Column(String(20))
    manager_id = Column(String(36), ForeignKey("employees.id"), nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date)
    employment_type = Column(String(20), nullable=False, default="Full-time")
    status = Column(String(20), nullable=False, default="Active", index=True)

    # Compensation
    salary = Column(Float, nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    pay_frequency = Column(String(20), nullable=False, default="Monthly")
    benefits = Column(JSON)

    # Performance
    performance_rating = Column(Float)
    last_review_date = Column(Date)
    goals = Column(JSON)

    documents = Column(JSON)

    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Weak self-reference: no cascade, resolved only for display
    manager = relationship("Employee", remote_side=[id], foreign_keys=[manager_id])

    __table_args__ = (
        # Email is unique among active records only; soft-deleted rows keep theirs
        Index(
            "uq_employees_active_email",
            "email",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )

    @property
    def full_name(self) -> str:
        return compose_full_name(self.first_name, self.last_name)

    @property
    def years_of_service(self) -> float:
        return calculate_years_of_service(self.start_date, self.end_date)

    def to_payload(self) -> Dict[str, Any]:
        """Stored fields in the nested camelCase shape accepted on create."""
        return {
            "personalInfo": {
                "firstName": self.first_name,
                "lastName": self.last_name,
                "email": self.email,
                "phone": self.phone,
                "dateOfBirth": self.date_of_birth,
                "address": self.address,
            },
            "employment": {
                "department": self.department,
                "position": self.position,
                "level": self.level,
                "manager": self.manager_id,
                "startDate": self.start_date,
                "endDate": self.end_date,
                "employmentType": self.employment_type,
                "status": self.status,
            },
            "compensation": {
                "salary": self.salary,
                "currency": self.currency,
                "payFrequency": self.pay_frequency,
                "benefits": self.benefits,
            },
            "performance": {
                "rating": self.performance_rating,
                "lastReviewDate": self.last_review_date,
                "goals": self.goals or [],
            },
            "documents": self.documents or [],
        }
