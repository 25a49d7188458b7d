"""Webinar management and learning-control results on top of the JSON store."""

import csv
import io
import shutil
import time
import uuid
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError

from webinar_platform.config.settings import Settings, get_settings
from webinar_platform.errors import PresentationError, SubmissionError, WebinarNotFoundError
from webinar_platform.ingestion.analyzer import SlideAnalyzer
from webinar_platform.ingestion.models import Slide
from webinar_platform.ingestion.tools import convert_to_html
from webinar_platform.rendering.reveal import PRESENTATION_FILE, write_presentation
from webinar_platform.storage.audit import AuditLog
from webinar_platform.storage.json_store import RESULTS_FILE, WEBINARS_FILE, JsonStorage
from webinar_platform.webinars.models import Question, QuizResult, QuizSubmission, Webinar, utc_now
from webinar_platform.webinars.quiz import is_valid_email, percentage, score_answers

logger = structlog.get_logger(__name__)

CSV_HEADERS = ["Webinar", "Name", "E-Mail", "Punkte", "Gesamt", "Prozent", "Bestanden", "Datum"]
SYSTEM_USER = "system"


def format_german_datetime(value: datetime) -> str:
    """``17.10.2026, 09:05:00`` in local time."""
    local = value.astimezone()
    return f"{local.day}.{local.month}.{local.year}, {local:%H:%M:%S}"


class WebinarService:
    """Create, edit and evaluate webinars.

    Every mutating operation is written to the audit log under ``user``.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        analyzer: SlideAnalyzer | None = None,
        audit: AuditLog | None = None,
    ):
        self.settings = settings if settings is not None else get_settings()
        data_dir = self.settings.storage.data_dir
        self.analyzer = analyzer if analyzer is not None else SlideAnalyzer(self.settings)
        self.audit = audit if audit is not None else AuditLog(data_dir)
        self.webinars = JsonStorage(WEBINARS_FILE, data_dir)
        self.results = JsonStorage(RESULTS_FILE, data_dir)

    # Webinars

    def list_webinars(self) -> list[Webinar]:
        data = self.webinars.read() or {}
        return [Webinar.model_validate(item) for item in data.get("webinars", [])]

    def get_webinar(self, webinar_id: str) -> Webinar:
        for webinar in self.list_webinars():
            if webinar.id == webinar_id:
                return webinar
        raise WebinarNotFoundError(f"Webinar nicht gefunden: {webinar_id}")

    async def create_webinar(
        self,
        title: str,
        pptx_file: str | None = None,
        questions: Sequence[Question | dict[str, Any]] | None = None,
        slides: Sequence[Slide] | None = None,
        user: str = SYSTEM_USER,
    ) -> Webinar:
        """Create a webinar.

        With a deck and no slides the deck is analyzed first. A failed analysis
        is audited and the webinar is created anyway, with a converted (or
        placeholder) HTML version of the deck instead of slides.

        Args:
            title: Webinar title.
            pptx_file: Deck filename inside the uploads directory.
            questions: Learning-control questions.
            slides: Prepared slides; skips the analysis.
            user: Name recorded in the audit log.

        Returns:
            The stored webinar.
        """
        webinar = Webinar(
            id=uuid.uuid4().hex,
            title=title,
            pptx_file=pptx_file,
            questions=[Question.model_validate(q) for q in questions or []],
        )
        log = logger.bind(webinar_id=webinar.id, title=title)

        slide_list = list(slides or [])
        if pptx_file and not slide_list:
            session_id = f"{webinar.id}-{time.time_ns() // 1_000_000}"
            self.audit.log("FILE_ANALYZE", user, f"Auto-analysiere: {pptx_file} für Webinar: {title}")
            try:
                slide_list = await self.analyzer.analyze_presentation(pptx_file, webinar.id, session_id)
            except Exception as e:
                log.warning("Auto-analysis failed", pptx_file=pptx_file, error=str(e))
                self.audit.log("FILE_ANALYZE_ERROR", user, f"Auto-Analyse fehlgeschlagen: {e}")
                webinar.presentation_file = await self._convert_deck(webinar.id, pptx_file)
            finally:
                self.analyzer.progress.delete(session_id)

        if slide_list:
            webinar.slides = [slide.to_dict() for slide in slide_list]
            self._write_presentation(webinar, slide_list)

        self.webinars.update(lambda data: _append(data, "webinars", webinar.to_storage()))
        self.audit.log("WEBINAR_CREATE", user, f"Webinar erstellt: {title}", webinar_id=webinar.id)
        log.info("Webinar created", slide_count=len(webinar.slides))
        return webinar

    def update_webinar(
        self,
        webinar_id: str,
        title: str | None = None,
        pptx_file: str | None = None,
        questions: Sequence[Question | dict[str, Any]] | None = None,
        slides: Sequence[Slide] | None = None,
        user: str = SYSTEM_USER,
    ) -> Webinar:
        """Apply the given fields; ``None`` leaves a field unchanged.

        Non-empty ``slides`` regenerate the presentation.
        """
        updated: Webinar | None = None

        def apply(data: dict[str, Any]) -> dict[str, Any]:
            nonlocal updated
            items = data.setdefault("webinars", [])
            for index, item in enumerate(items):
                if item.get("id") != webinar_id:
                    continue
                webinar = Webinar.model_validate(item)
                changes: dict[str, Any] = {"updated_at": utc_now()}
                if title:
                    changes["title"] = title
                if pptx_file is not None:
                    changes["pptx_file"] = pptx_file
                if questions is not None:
                    changes["questions"] = [Question.model_validate(q) for q in questions]
                if slides:
                    changes["slides"] = [slide.to_dict() for slide in slides]
                    changes["presentation_file"] = PRESENTATION_FILE
                updated = webinar.model_copy(update=changes)
                items[index] = updated.to_storage()
                return data
            raise WebinarNotFoundError(f"Webinar nicht gefunden: {webinar_id}")

        self.webinars.update(apply)
        assert updated is not None

        if slides:
            self._write_presentation(updated, list(slides))

        self.audit.log("WEBINAR_UPDATE", user, f"Webinar aktualisiert: {updated.title}", webinar_id=webinar_id)
        return updated

    def delete_webinar(self, webinar_id: str, user: str = SYSTEM_USER) -> None:
        """Remove the webinar and its generated presentation directory."""
        removed: dict[str, Any] = {}

        def apply(data: dict[str, Any]) -> dict[str, Any]:
            items = data.setdefault("webinars", [])
            for index, item in enumerate(items):
                if item.get("id") == webinar_id:
                    removed.update(items.pop(index))
                    return data
            raise WebinarNotFoundError(f"Webinar nicht gefunden: {webinar_id}")

        self.webinars.update(apply)
        self.audit.log("WEBINAR_DELETE", user, f"Webinar gelöscht: {removed.get('title')}", webinar_id=webinar_id)

        slides_dir = self.settings.storage.slides_dir / webinar_id
        if not slides_dir.exists():
            return
        try:
            shutil.rmtree(slides_dir)
        except OSError as e:
            logger.error("Failed to delete slides directory", path=str(slides_dir), error=str(e))

    def render_webinar(self, webinar_id: str) -> str:
        """Regenerate the presentation from the stored slides.

        Returns:
            Path of the written HTML file.
        """
        webinar = self.get_webinar(webinar_id)
        return str(self._write_presentation(webinar, webinar.slide_objects()))

    # Results

    def submit_result(self, webinar_id: str, submission: QuizSubmission | dict[str, Any]) -> QuizResult:
        """Score and store a participant's answers.

        Raises:
            SubmissionError: Missing fields or an invalid email address.
            WebinarNotFoundError: Unknown webinar.
        """
        try:
            submission = QuizSubmission.model_validate(submission)
        except ValidationError as e:
            raise SubmissionError(f"Name, E-Mail und Antworten erforderlich: {e}") from e

        if not submission.name.strip() or not submission.email.strip():
            raise SubmissionError("Name, E-Mail und Antworten erforderlich")
        if not is_valid_email(submission.email):
            raise SubmissionError(f"Ungültige E-Mail-Adresse: {submission.email}")

        webinar = self.get_webinar(webinar_id)
        score = score_answers(webinar.questions, submission.answers)
        total = len(webinar.questions)
        pct = percentage(score, total)

        result = QuizResult(
            id=uuid.uuid4().hex,
            webinar_id=webinar.id,
            webinar_title=webinar.title,
            participant_name=submission.name,
            participant_email=submission.email,
            score=score,
            total_questions=total,
            percentage=pct,
            passed=pct >= self.settings.quiz.passing_percentage,
            answers=submission.answers,
            confirmed=submission.confirmed,
        )

        self.results.update(lambda data: _append(data, "results", result.to_storage()))
        self.audit.log(
            "WEBINAR_COMPLETE",
            submission.email,
            f"Webinar abgeschlossen: {webinar.title} ({score}/{total})",
            webinar_id=webinar.id,
        )
        logger.info("Quiz result stored", webinar_id=webinar.id, score=score, total=total, passed=result.passed)
        return result

    def list_results(self) -> list[QuizResult]:
        data = self.results.read() or {}
        return [QuizResult.model_validate(item) for item in data.get("results", [])]

    def export_results_csv(self) -> str:
        """All results as CSV for spreadsheet import, UTF-8 BOM included."""
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(CSV_HEADERS)
        for r in self.list_results():
            writer.writerow(
                [
                    r.webinar_title,
                    r.participant_name,
                    r.participant_email,
                    r.score,
                    r.total_questions,
                    r.percentage,
                    "Ja" if r.passed else "Nein",
                    format_german_datetime(r.completed_at),
                ]
            )
        return "\ufeff" + buffer.getvalue().rstrip("\n")

    # Helpers

    def _write_presentation(self, webinar: Webinar, slides: list[Slide]) -> Path:
        path = write_presentation(self.settings.storage.slides_dir, webinar.id, slides, title=webinar.title)
        webinar.presentation_file = PRESENTATION_FILE
        return path

    async def _convert_deck(self, webinar_id: str, pptx_file: str) -> str | None:
        try:
            source = self.analyzer.resolve_upload(pptx_file)
        except PresentationError:
            return None
        tools = self.settings.tools
        return await convert_to_html(
            source,
            self.settings.storage.slides_dir / webinar_id,
            timeout=tools.convert_timeout,
            binary=tools.libreoffice_binary,
        )


def _append(data: dict[str, Any], key: str, item: dict[str, Any]) -> dict[str, Any]:
    data.setdefault(key, []).append(item)
    return data
