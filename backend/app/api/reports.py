from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.database import get_db
from app.models.chapter import Chapter
from app.models.comment import Comment
from app.models.report import Report
from app.models.story import Story
from app.models.user import User
from app.schemas.report import ReportCreate, ReportResponse
from app.services.notifications import notify_report_filed

router = APIRouter(prefix="/reports", tags=["reports"])

_TARGET_MODELS = {"story": Story, "chapter": Chapter, "comment": Comment}


@router.post("", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
async def create_report(
    report_in: ReportCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ReportResponse:
    model = _TARGET_MODELS[report_in.target_type]
    if not db.query(model.id).filter(model.id == report_in.target_id).first():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Reported {report_in.target_type} not found",
        )

    report = Report(
        user_id=current_user.id,
        target_type=report_in.target_type,
        target_id=report_in.target_id,
        reason=report_in.reason.strip(),
    )
    db.add(report)
    db.commit()
    db.refresh(report)

    notify_report_filed(
        report_id=report.id,
        target_type=report.target_type,
        target_id=report.target_id,
        reason=report.reason,
        reporter_email=current_user.email,
    )
    return ReportResponse.model_validate(report)
