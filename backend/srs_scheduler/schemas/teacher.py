from pydantic import BaseModel, EmailStr, Field


class TeacherCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr


class TeacherOut(TeacherCreate):
    id: str

    model_config = {"from_attributes": True}
