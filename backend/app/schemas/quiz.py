from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class QuestionPublic(CamelModel):
    id: str
    position: int
    prompt: str
    correct_answer: str
    explanation: str | None = None


class QuizPublic(CamelModel):
    id: str
    title: str
    description: str | None
    user_id: str
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None
    questions: list[QuestionPublic] = []


class QuizWithProgress(QuizPublic):
    progress: int | None = None
    teacher_name: str
    is_attempted: bool = False


class DashboardQuizzes(CamelModel):
    active_quizzes: list[QuizWithProgress] = []
    attempted_quizzes: list[QuizWithProgress] = []


class QuestionCreate(CamelModel):
    prompt: str
    correct_answer: str
    explanation: str | None = None


class QuizCreateRequest(CamelModel):
    title: str = Field(min_length=1, max_length=300)
    description: str | None = Field(default=None, max_length=5000)
    is_active: bool = True
    questions: list[QuestionCreate] = []


class QuizPatch(CamelModel):
    """Caller-writable quiz fields. Anything else in the body is dropped."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    title: str | None = Field(default=None, max_length=300)
    description: str | None = Field(default=None, max_length=5000)
    is_active: bool | None = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("title must not be empty")
        return v

    def to_values(self) -> dict:
        # Only the keys the caller actually sent; an explicit null clears description only.
        values = self.model_dump(exclude_unset=True, by_alias=False)
        for key in ("title", "is_active"):
            if key in values and values[key] is None:
                values.pop(key)
        return values


class AttemptCreateRequest(CamelModel):
    progress: int | None = Field(default=None, ge=0, le=100)
    finished: bool = True


class AttemptPublic(CamelModel):
    id: str
    quiz_id: str
    user_id: str
    progress: int | None
    started_at: datetime
    finished_at: datetime | None
