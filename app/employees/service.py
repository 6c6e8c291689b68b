import math
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.exc import SQLAlchemyError

from app.core.error_handlers import format_validation_errors
from app.core.exceptions import DatabaseError, ValidationError, field_error
from app.core.service_base import BaseService
from app.core.validators import escape_like
from app.employees.models import Employee, format_employee_id
from app.employees.schemas import EmployeeCreate, EmploymentStatus

logger = logging.getLogger(__name__)

# Wire paths accepted by sortBy, mapped to columns
SORT_FIELDS = {
    "createdAt": Employee.created_at,
    "updatedAt": Employee.updated_at,
    "employeeId": Employee.employee_id,
    "personalInfo.firstName": Employee.first_name,
    "personalInfo.lastName": Employee.last_name,
    "personalInfo.email": Employee.email,
    "employment.department": Employee.department,
    "employment.position": Employee.position,
    "employment.status": Employee.status,
    "employment.startDate": Employee.start_date,
    "compensation.salary": Employee.salary,
}

# Bare field names ("salary") are shorthand for their full path
SORT_ALIASES = {path.split(".")[-1]: path for path in SORT_FIELDS if "." in path}

# Keys in an update payload that never overwrite stored values
IMMUTABLE_FIELDS = {"id", "employeeId", "isActive", "createdAt", "updatedAt", "fullName", "yearsOfService"}


@dataclass
class EmployeeFilters:
    department: Optional[str] = None
    status: Optional[str] = None
    search: Optional[str] = None


def merge_payload(existing: Dict[str, Any], incoming: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge an update payload onto a stored record.

    Sections (personalInfo, employment, ...) are merged key by key so a
    partial section keeps its unspecified fields. Values inside a section,
    including nested objects such as address or benefits, replace the
    stored value wholesale. Lists replace wholesale too.
    """
    merged = dict(existing)
    for key, value in incoming.items():
        if key in IMMUTABLE_FIELDS:
            continue
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


class EmployeeService(BaseService):
    """Listing and lifecycle operations for employee records."""

    def __init__(self, db: Session):
        super().__init__(db)

    def _active_query(self):
        return self.db.query(Employee).options(joinedload(Employee.manager)).filter(Employee.is_active.is_(True))

    def list_employees(
        self,
        filters: EmployeeFilters,
        page: int = 1,
        limit: int = 10,
        sort_by: str = "createdAt",
        sort_order: str = "desc"
    ) -> Tuple[List[Employee], Dict[str, Any]]:
        """Return one page of active employees matching the filters, plus pagination metadata."""
        sort_column = SORT_FIELDS.get(SORT_ALIASES.get(sort_by, sort_by))
        if sort_column is None:
            raise ValidationError(errors=[field_error(
                "sortBy",
                f"Sort field must be one of: {', '.join(SORT_FIELDS)}",
                sort_by
            )])
        if sort_order not in ("asc", "desc"):
            raise ValidationError(errors=[field_error("sortOrder", "Sort order must be 'asc' or 'desc'", sort_order)])

        query = self.db.query(Employee).filter(Employee.is_active.is_(True))

        if filters.department:
            query = query.filter(Employee.department == filters.department)
        if filters.status:
            query = query.filter(Employee.status == filters.status)
        if filters.search and filters.search.strip():
            pattern = f"%{escape_like(filters.search.strip())}%"
            query = query.filter(or_(
                Employee.first_name.ilike(pattern, escape="\\"),
                Employee.last_name.ilike(pattern, escape="\\"),
                Employee.email.ilike(pattern, escape="\\"),
                Employee.employee_id.ilike(pattern, escape="\\"),
            ))

        try:
            total = query.count()

            ordering = sort_column.desc() if sort_order == "desc" else sort_column.asc()
            tie_breaker = Employee.employee_id.desc() if sort_order == "desc" else Employee.employee_id.asc()
            page_query = self.paginate_query(
                query.options(joinedload(Employee.manager)).order_by(ordering, tie_breaker),
                page,
                limit
            )
            employees = page_query.all()
        except SQLAlchemyError as e:
            logger.error(f"Database error listing employees: {str(e)}")
            raise DatabaseError(detail="Error retrieving employees", operation="list_employees")

        total_pages = math.ceil(total / limit) if total else 0
        pagination = {
            "currentPage": page,
            "totalPages": total_pages,
            "totalEmployees": total,
            "limit": limit,
            "hasNextPage": page < total_pages,
            "hasPrevPage": page > 1,
        }
        return employees, pagination

    def get_employee(self, employee_id: str) -> Employee:
        """Get an active employee by record id."""
        return self.get_or_404(
            self._active_query().filter(Employee.id == employee_id),
            employee_id,
            "Employee"
        )

    def create_employee(self, employee_data: EmployeeCreate) -> Employee:
        """Validate references, assign the next employee id and persist a new record."""
        email = employee_data.personal_info.email
        self.check_unique_constraint(
            self._active_query().filter(Employee.email == email),
            Employee,
            "personalInfo.email",
            email,
            resource_type="Employee"
        )
        self._check_manager(employee_data.employment.manager)

        employee = Employee(employee_id=self._next_employee_id(), is_active=True)
        self._apply(employee, employee_data)

        self.db.add(employee)
        self.safe_commit("Error creating employee", resource_type="Employee")
        self.db.refresh(employee)

        self.log_service_action("create_employee", "Employee", employee.id, {"employee_code": employee.employee_id})
        return employee

    def update_employee(self, employee_id: str, payload: Dict[str, Any]) -> Employee:
        """Merge a partial payload onto an active record and re-validate the result."""
        employee = self.get_employee(employee_id)

        merged = merge_payload(employee.to_payload(), payload)
        employee_data = self.validate_payload(merged)

        new_email = employee_data.personal_info.email
        if new_email != employee.email:
            self.check_unique_constraint(
                self._active_query().filter(Employee.email == new_email),
                Employee,
                "personalInfo.email",
                new_email,
                resource_type="Employee",
                exclude_id=employee.id
            )

        manager_id = employee_data.employment.manager
        if manager_id == employee.id:
            raise ValidationError(errors=[field_error(
                "employment.manager", "Employee cannot be their own manager", manager_id
            )])
        if manager_id != employee.manager_id:
            self._check_manager(manager_id)

        self._apply(employee, employee_data)
        self.safe_commit("Error updating employee", resource_type="Employee")
        self.db.refresh(employee)

        self.log_service_action("update_employee", "Employee", employee.id)
        return employee

    def soft_delete_employee(self, employee_id: str) -> Employee:
        """Terminate an active employee without removing the record."""
        employee = self.get_employee(employee_id)

        employee.is_active = False
        employee.status = EmploymentStatus.TERMINATED.value
        employee.end_date = date.today()

        self.safe_commit("Error deleting employee", resource_type="Employee")
        self.db.refresh(employee)

        self.log_service_action("soft_delete_employee", "Employee", employee.id)
        return employee

    @staticmethod
    def validate_payload(payload: Dict[str, Any]) -> EmployeeCreate:
        """Validate a raw payload with the create rules, collecting every field error."""
        try:
            return EmployeeCreate.model_validate(payload)
        except PydanticValidationError as e:
            raise ValidationError(errors=format_validation_errors(e.errors()))

    def _next_employee_id(self) -> str:
        # Counts soft-deleted records too so ids are never reissued
        return format_employee_id(self.db.query(Employee).count() + 1)

    def _check_manager(self, manager_id: Optional[str]):
        if manager_id is None:
            return
        manager = self.db.query(Employee).filter(
            Employee.id == manager_id,
            Employee.is_active.is_(True)
        ).first()
        if manager is None:
            raise ValidationError(errors=[field_error("employment.manager", "Manager not found", manager_id)])

    @staticmethod
    def _apply(employee: Employee, data: EmployeeCreate):
        personal = data.personal_info
        employee.first_name = personal.first_name
        employee.last_name = personal.last_name
        employee.email = personal.email
        employee.phone = personal.phone
        employee.date_of_birth = personal.date_of_birth
        employee.address = personal.address.model_dump(mode="json", by_alias=True) if personal.address else None

        employment = data.employment
        employee.department = employment.department.value
        employee.position = employment.position
        employee.level = employment.level.value if employment.level else None
        employee.manager_id = employment.manager
        employee.start_date = employment.start_date
        employee.end_date = employment.end_date
        employee.employment_type = employment.employment_type.value
        employee.status = employment.status.value

        compensation = data.compensation
        employee.salary = compensation.salary
        employee.currency = compensation.currency.upper()
        employee.pay_frequency = compensation.pay_frequency.value
        employee.benefits = compensation.benefits.model_dump(mode="json", by_alias=True)

        performance = data.performance
        employee.performance_rating = performance.rating
        employee.last_review_date = performance.last_review_date
        employee.goals = [goal.model_dump(mode="json", by_alias=True) for goal in performance.goals]

        employee.documents = [document.model_dump(mode="json", by_alias=True) for document in data.documents]
