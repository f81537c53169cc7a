from typing import List
from sqlmodel import Field, SQLModel
from sqlalchemy import Column, JSON


class AnalyticsRecord(SQLModel, table=True):
    """
    Statistiques agrégées d'une vidéo. Créée à la première écriture pour un id.
    Aucune clé étrangère vers video_metadata : les deux vivent indépendamment.
    """

    __tablename__ = "analytics_record"

    video_id: str = Field(primary_key=True)
    views: int = Field(default=0, ge=0)
    total_watch_time: float = Field(default=0.0, ge=0)
    duration: float = Field(default=0.0, ge=0)
    # pourcentages de complétion (0-100), dans l'ordre d'arrivée
    watch_sessions: List[int] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
