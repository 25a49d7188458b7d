"""Persisted webinar, quiz and result records.

Records are stored in camelCase JSON; attributes use snake_case.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from webinar_platform.ingestion.models import Slide


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StoredModel(BaseModel):
    """Base for records kept in the JSON data files."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_storage(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class Question(StoredModel):
    """A multiple-choice question of the learning control."""

    question: str = Field(..., min_length=1, description="Question text")
    options: list[str] = Field(..., min_length=2, description="Answer options")
    correct_answer: int = Field(..., ge=0, description="Index of the correct option")

    @model_validator(mode="after")
    def check_correct_answer(self) -> "Question":
        if self.correct_answer >= len(self.options):
            raise ValueError("correct_answer must index one of the options")
        return self


class Webinar(StoredModel):
    """A webinar: deck, slides and learning-control questions."""

    id: str
    title: str = Field(..., min_length=1)
    pptx_file: str | None = Field(None, description="Uploaded deck filename")
    questions: list[Question] = Field(default_factory=list)
    slides: list[dict[str, Any]] = Field(default_factory=list, description="Slides in persisted form")
    presentation_file: str | None = Field(None, description="Generated HTML file under slides/<id>/")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "id": "1718030400000",
                    "title": "Arbeitsschutz 2026",
                    "pptxFile": "arbeitsschutz.pptx",
                    "questions": [
                        {
                            "question": "Wer ist für den Arbeitsschutz verantwortlich?",
                            "options": ["Der Arbeitgeber", "Niemand"],
                            "correctAnswer": 0,
                        }
                    ],
                }
            ]
        }
    )

    def slide_objects(self) -> list[Slide]:
        return [Slide.from_dict(slide) for slide in self.slides]


class QuizSubmission(BaseModel):
    """A participant's answers as submitted."""

    name: str = Field(..., description="Participant name")
    email: str = Field(..., description="Participant email")
    answers: list[int | None] = Field(..., description="Chosen option index per question")
    confirmed: bool = Field(False, description="Participant confirmed attendance")


class QuizResult(StoredModel):
    """A scored submission."""

    id: str
    webinar_id: str
    webinar_title: str
    participant_name: str
    participant_email: str
    score: int
    total_questions: int
    percentage: int
    passed: bool
    answers: list[int | None] = Field(default_factory=list)
    confirmed: bool = False
    completed_at: datetime = Field(default_factory=utc_now)
