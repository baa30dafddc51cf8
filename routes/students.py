# routes/students.py
from fastapi import APIRouter, Depends, Request
from typing import Optional
import logging
import re

from database import StudentStore
from errors import InvalidAgeError, InvalidBodyError, InvalidIdentifierError, MissingFieldError, NotFoundError
from models.student import is_valid_student_id, parse_number, validate_student_fields
from responses import envelope

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/students", tags=["students"])

DEFAULT_LIMIT = 10
DEFAULT_SKIP = 0

LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def get_student_store(request: Request) -> StudentStore:
    return request.app.state.database.students


async def read_student_body(request: Request) -> dict:
    """Fields from a JSON object or form body; empty when there is no body."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        return dict(form)
    if not await request.body():
        return {}
    try:
        body = await request.json()
    except ValueError:
        raise InvalidBodyError()
    if not isinstance(body, dict):
        raise InvalidBodyError()
    return body


def parse_int(value: Optional[str], default: int) -> int:
    """Read the leading integer of a query value; fall back to ``default``
    when there is none or it is zero or negative."""
    if value is None:
        return default
    match = LEADING_INT.match(value)
    if not match:
        return default
    number = int(match.group(1))
    return number if number > 0 else default


def require_valid_id(id: str):
    if not is_valid_student_id(id):
        raise InvalidIdentifierError()


def check_age(age):
    number = parse_number(age)
    if number is None or number <= 0:
        raise InvalidAgeError("Age must be a valid positive number")


@router.post("/createStudent", status_code=201)
async def create_student(student: dict = Depends(read_student_body), store: StudentStore = Depends(get_student_store)):
    name = student.get("name")
    age = student.get("age")
    department = student.get("department")

    if not name or not age or not department:
        raise MissingFieldError("Please provide name, age, and department")
    check_age(age)

    fields = validate_student_fields({"name": name, "age": age, "department": department})
    new_student = await store.create(fields)
    return envelope(True, "Student created successfully", data=new_student)


@router.get("/getStudent")
async def get_all_students(
    limit: Optional[str] = None,
    skip: Optional[str] = None,
    store: StudentStore = Depends(get_student_store),
):
    limit = parse_int(limit, DEFAULT_LIMIT)
    skip = parse_int(skip, DEFAULT_SKIP)
    logger.info(f"Fetching students with limit={limit}, skip={skip}")

    students = await store.find(limit=limit, skip=skip)
    total_count = await store.count()
    return envelope(
        True,
        "Students retrieved successfully",
        count=len(students),
        totalCount=total_count,
        data=students,
    )


@router.get("/getStudent/{id}")
async def get_student_by_id(id: str, store: StudentStore = Depends(get_student_store)):
    require_valid_id(id)
    student = await store.find_by_id(id)
    if not student:
        raise NotFoundError()
    return envelope(True, "Student retrieved successfully", data=student)


@router.put("/updateStudent/{id}")
async def update_student(id: str, student: dict = Depends(read_student_body), store: StudentStore = Depends(get_student_store)):
    require_valid_id(id)

    name = student.get("name")
    age = student.get("age")
    department = student.get("department")

    if not name and not age and not department:
        raise MissingFieldError("Please provide at least one field to update")
    if "age" in student:
        check_age(age)

    update_data = {}
    if name:
        update_data["name"] = name
    if age:
        update_data["age"] = age
    if department:
        update_data["department"] = department
    update_data = validate_student_fields(update_data, partial=True)

    updated_student = await store.update_by_id(id, update_data)
    if not updated_student:
        raise NotFoundError()
    return envelope(True, "Student updated successfully", data=updated_student)


@router.delete("/deleteStudent/{id}")
async def delete_student(id: str, store: StudentStore = Depends(get_student_store)):
    require_valid_id(id)
    deleted_student = await store.delete_by_id(id)
    if not deleted_student:
        raise NotFoundError()
    return envelope(True, "Student deleted successfully", data=deleted_student)
