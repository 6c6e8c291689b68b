from typing import Any, Dict, Literal, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.dependencies import get_current_admin_user
from app.core.schemas import ApiResponse
from app.auth.models import Admin
from app.employees.schemas import (
    Department,
    EmployeeCreate,
    EmployeeListResponse,
    EmployeeResponse,
    EmploymentStatus,
    Pagination
)
from app.employees.service import EmployeeService, EmployeeFilters

router = APIRouter(prefix="/employees", tags=["employees"])


@router.get("", response_model=ApiResponse[EmployeeListResponse])
async def list_employees(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    department: Optional[Department] = None,
    employee_status: Optional[EmploymentStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None, max_length=100),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    current_admin: Admin = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """List active employees with filtering, search, sorting and pagination."""
    employee_service = EmployeeService(db)
    filters = EmployeeFilters(
        department=department.value if department else None,
        status=employee_status.value if employee_status else None,
        search=search
    )
    employees, pagination = employee_service.list_employees(filters, page, limit, sort_by, sort_order)

    return ApiResponse(data=EmployeeListResponse(
        employees=[EmployeeResponse.from_employee(employee) for employee in employees],
        pagination=Pagination.model_validate(pagination)
    ))


@router.get("/{employee_id}", response_model=ApiResponse[EmployeeResponse])
async def get_employee(
    employee_id: str,
    current_admin: Admin = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Get a single active employee."""
    employee = EmployeeService(db).get_employee(employee_id)
    return ApiResponse(data=EmployeeResponse.from_employee(employee))


@router.post("", response_model=ApiResponse[EmployeeResponse], status_code=status.HTTP_201_CREATED)
async def create_employee(
    employee_data: EmployeeCreate,
    current_admin: Admin = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Create a new employee; the employee id is assigned by the server."""
    employee = EmployeeService(db).create_employee(employee_data)
    return ApiResponse(
        message="Employee created successfully",
        data=EmployeeResponse.from_employee(employee)
    )


@router.put("/{employee_id}", response_model=ApiResponse[EmployeeResponse])
async def update_employee(
    employee_id: str,
    payload: Dict[str, Any] = Body(...),
    current_admin: Admin = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Update an employee with a partial or full payload."""
    employee = EmployeeService(db).update_employee(employee_id, payload)
    return ApiResponse(
        message="Employee updated successfully",
        data=EmployeeResponse.from_employee(employee)
    )


@router.delete("/{employee_id}", response_model=ApiResponse[EmployeeResponse])
async def delete_employee(
    employee_id: str,
    current_admin: Admin = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Soft delete an employee: the record is kept and marked terminated."""
    employee = EmployeeService(db).soft_delete_employee(employee_id)
    return ApiResponse(
        message="Employee deleted successfully",
        data=EmployeeResponse.from_employee(employee)
    )
