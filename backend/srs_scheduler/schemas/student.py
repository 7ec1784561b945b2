from pydantic import BaseModel, Field


class StudentCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    class_name: str = Field(alias="className", min_length=1, max_length=50)
    section: str = Field(min_length=1, max_length=20)

    model_config = {"populate_by_name": True}


class StudentOut(StudentCreate):
    id: str

    model_config = {"from_attributes": True, "populate_by_name": True}
