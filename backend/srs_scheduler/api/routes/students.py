from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from srs_scheduler.api.deps import get_db
from srs_scheduler.core.exceptions import ResourceNotFoundError
from srs_scheduler.models.student import Student
from srs_scheduler.schemas.student import StudentCreate, StudentOut

router = APIRouter()


@router.get("/", response_model=list[StudentOut])
def list_students(
    class_name: str | None = Query(default=None, alias="className"),
    section: str | None = None,
    db: Session = Depends(get_db),
) -> list[StudentOut]:
    stmt = select(Student).order_by(Student.class_name.asc(), Student.section.asc(), Student.name.asc())
    if class_name:
        stmt = stmt.where(Student.class_name == class_name)
    if section:
        stmt = stmt.where(Student.section == section)
    return list(db.execute(stmt).scalars())


@router.post("/", response_model=StudentOut, status_code=status.HTTP_201_CREATED)
def create_student(payload: StudentCreate, db: Session = Depends(get_db)) -> StudentOut:
    student = Student(**payload.model_dump())
    db.add(student)
    db.commit()
    db.refresh(student)
    return student


@router.get("/{student_id}", response_model=StudentOut)
def get_student(student_id: str, db: Session = Depends(get_db)) -> StudentOut:
    student = db.get(Student, student_id)
    if student is None:
        raise ResourceNotFoundError("Student", student_id)
    return student
