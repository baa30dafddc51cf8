# models/student.py
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError
from datetime import datetime
from typing import Annotated, Optional
import math
import re

from errors import ValidationError

NAME_MAX_LENGTH = 100
DEPARTMENT_MAX_LENGTH = 50
AGE_MIN = 1
AGE_MAX = 120

OBJECT_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")

REQUIRED_MESSAGES = {
    "name": "Please provide a student name",
    "age": "Please provide student age",
    "department": "Please provide a department",
}

AGE_MESSAGES = {
    "greater_than_equal": f"Age must be at least {AGE_MIN}",
    "less_than_equal": f"Age cannot exceed {AGE_MAX}",
    "int_from_float": "Age must be a whole number",
}


def parse_number(value) -> Optional[float]:
    """Return ``value`` as a number, or None when it is not numeric.

    Numeric strings count as numbers; booleans do not.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _numeric_age(value):
    if value is None:
        return value
    number = parse_number(value)
    if number is None:
        raise PydanticCustomError("not_a_number", "Age must be a number")
    return number


Name = Annotated[str, Field(strict=True, min_length=1, max_length=NAME_MAX_LENGTH)]
Department = Annotated[str, Field(strict=True, min_length=1, max_length=DEPARTMENT_MAX_LENGTH)]
Age = Annotated[int, BeforeValidator(_numeric_age), Field(ge=AGE_MIN, le=AGE_MAX)]


class StudentFields(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Name
    age: Age
    department: Department


class StudentUpdateFields(StudentFields):
    # Omitted fields stay unset; an explicit null still fails validation.
    name: Name = None
    age: Age = None
    department: Department = None


class Student(BaseModel):
    id: str  # ObjectId as hex string
    name: str
    age: int
    department: str
    createdAt: datetime
    updatedAt: datetime

    @classmethod
    def from_document(cls, doc: dict) -> "Student":
        return cls(
            id=str(doc["_id"]),
            name=doc["name"],
            age=doc["age"],
            department=doc["department"],
            createdAt=doc["createdAt"],
            updatedAt=doc["updatedAt"],
        )


def is_valid_student_id(value) -> bool:
    return isinstance(value, str) and OBJECT_ID_PATTERN.match(value) is not None


def _error_message(field: str, error: dict) -> str:
    if error["type"] == "missing" or error.get("input") is None:
        return REQUIRED_MESSAGES[field]
    if field == "age":
        return AGE_MESSAGES.get(error["type"], "Age must be a number")
    label = field.capitalize()
    if error["type"] == "string_too_short":
        return REQUIRED_MESSAGES[field]
    if error["type"] == "string_too_long":
        return f"{label} cannot exceed {error['ctx']['max_length']} characters"
    return f"{label} must be text"


def validate_student_fields(fields: dict, partial: bool = False) -> dict:
    """Check student fields against the schema constraints.

    Returns the cleaned fields (trimmed text, integer age). With ``partial``
    only the keys present in ``fields`` are checked, which is what updates use.
    Raises ValidationError carrying one message per violated field.
    """
    model = StudentUpdateFields if partial else StudentFields
    try:
        student = model.model_validate(fields)
    except PydanticValidationError as e:
        messages = []
        seen = set()
        for error in e.errors():
            field = error["loc"][0]
            if field in seen:
                continue
            seen.add(field)
            messages.append(_error_message(field, error))
        raise ValidationError(messages)
    return student.model_dump(exclude_unset=True)
