from pydantic import BaseModel, Field


class CourseCreate(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=200)


class CourseOut(CourseCreate):
    id: str

    model_config = {"from_attributes": True}
