"""
Router pour les tableaux de bord. Les compteurs sont recalculés à chaque appel.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_actor
from app.schemas.stats import AdminStats, ParentStats, TutorStats
from app.services import stats_service
from app.services.access_policy import Actor

router = APIRouter(prefix="/api/v1/stats", tags=["Statistiques"])


@router.get("/admin", response_model=AdminStats, summary="Statistiques de la plateforme")
def admin_stats(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return stats_service.admin_dashboard(db, actor)


@router.get("/parent", response_model=ParentStats, summary="Tableau de bord parent")
def parent_stats(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return stats_service.parent_dashboard(db, actor)


@router.get("/tutor", response_model=TutorStats, summary="Tableau de bord répétiteur")
def tutor_stats(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return stats_service.tutor_dashboard(db, actor)
