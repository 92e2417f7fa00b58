from decimal import Decimal
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from unigrade.config.settings import settings
from unigrade.core.grades import letter_grade
from unigrade.core.models import CourseGradeWeights
from unigrade.core.validation import ValidationError
from unigrade.services.grading_service import EnrollmentNotFoundError, GradingService
from unigrade.services.storage import Storage, StorageError
from unigrade.services.transcript_service import TranscriptService


app = FastAPI(title="UniGrade API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_allowed_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class WeightsPayload(BaseModel):
    assignments_weight: Decimal
    quizzes_weight: Decimal
    exams_weight: Decimal


class OverridePayload(BaseModel):
    grade: str


_store: Optional[Storage] = None


def get_storage() -> Storage:
    global _store
    if _store is None:
        _store = Storage.from_settings()
    return _store


def _storage_failure(exc: StorageError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def _weights_dict(weights: CourseGradeWeights) -> Dict:
    return {
        "course_id": weights.course_id,
        "assignments_weight": str(weights.assignments_weight),
        "quizzes_weight": str(weights.quizzes_weight),
        "exams_weight": str(weights.exams_weight),
    }


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/letter-grade")
def get_letter_grade(percentage: float = Query(allow_inf_nan=False)) -> Dict[str, str]:
    return {"letter": letter_grade(percentage)}


@app.get("/courses/{course_id}/weights")
def get_weights(course_id: int, store: Storage = Depends(get_storage)) -> Dict:
    try:
        weights = GradingService(store).get_grade_weights(course_id)
    except StorageError as exc:
        raise _storage_failure(exc) from exc
    if weights is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No grade weights configured")
    return _weights_dict(weights)


@app.put("/courses/{course_id}/weights")
def save_weights(course_id: int, payload: WeightsPayload, store: Storage = Depends(get_storage)) -> Dict:
    weights = CourseGradeWeights(
        course_id=course_id,
        assignments_weight=payload.assignments_weight,
        quizzes_weight=payload.quizzes_weight,
        exams_weight=payload.exams_weight,
    )
    try:
        GradingService(store).save_grade_weights(weights)
        return _weights_dict(weights)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except StorageError as exc:
        raise _storage_failure(exc) from exc


@app.get("/courses/{course_id}/students/{student_id}/final-grade")
def get_final_grade(course_id: int, student_id: int, store: Storage = Depends(get_storage)) -> Dict:
    grading = GradingService(store)
    try:
        configured = grading.get_grade_weights(course_id) is not None
        pct = grading.compute_final_grade(course_id, student_id) if configured else None
    except StorageError as exc:
        raise _storage_failure(exc) from exc
    return {
        "course_id": course_id,
        "student_id": student_id,
        "configured": configured,
        "percentage": pct,
        "letter": letter_grade(pct) if pct is not None else None,
    }


@app.get("/courses/{course_id}/final-grades")
def list_final_grades(course_id: int, store: Storage = Depends(get_storage)) -> List[Dict]:
    try:
        grades = GradingService(store).student_final_grades(course_id)
    except StorageError as exc:
        raise _storage_failure(exc) from exc
    return [
        {
            "enrollment_id": g.enrollment_id,
            "student_id": g.student_id,
            "student_name": g.student_name,
            "calculated_percentage": g.calculated_percentage,
            "calculated_grade": g.calculated_grade,
            "current_grade": g.current_grade,
            "is_overridden": g.is_overridden,
            "state": g.state.value,
        }
        for g in grades
    ]


@app.put("/enrollments/{enrollment_id}/grade")
def override_grade(enrollment_id: int, payload: OverridePayload, store: Storage = Depends(get_storage)) -> Dict:
    try:
        grade = GradingService(store).override_final_grade(enrollment_id, payload.grade)
        return {"enrollment_id": enrollment_id, "grade": grade}
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except EnrollmentNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except StorageError as exc:
        raise _storage_failure(exc) from exc


@app.get("/students/{student_id}/transcript")
def get_transcript(student_id: int, store: Storage = Depends(get_storage)) -> Dict:
    try:
        t = TranscriptService(store, settings.a_plus_points).transcript(student_id)
    except StorageError as exc:
        raise _storage_failure(exc) from exc
    return {
        "student_id": student_id,
        "gpa": t.gpa,
        "total_credits": t.total_credits,
        "entries": [
            {
                "course_code": e.course_code,
                "course_name": e.course_name,
                "credits": e.credits,
                "grade": e.grade,
                "semester": e.semester,
            }
            for e in t.entries
        ],
    }
