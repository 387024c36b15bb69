from pydantic import BaseModel


class SubjectCountResponse(BaseModel):
    subject: str
    count: int


class StudentCountResponse(BaseModel):
    student_id: str
    student_name: str
    count: int


class StatusCountResponse(BaseModel):
    status: str
    count: int


class AnalyticsResponse(BaseModel):
    total_uploads: int
    subject_wise: list[SubjectCountResponse]
    student_wise: list[StudentCountResponse]
    status_wise: list[StatusCountResponse]
    recent_uploads: int
