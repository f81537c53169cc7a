from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnalyticsEventIn(BaseModel):
    # tout est optionnel ici : les combinaisons invalides donnent un 400 côté service
    id: Optional[str] = Field(None, examples=["3f1c2b9e-1d2a-4c55-9a51-8a7c5f0e2d11"])
    action: Optional[str] = Field(None, examples=["view", "watch"])
    watched: Optional[float] = Field(None, description="Position courante (s)", examples=[5.0])
    duration: Optional[float] = Field(None, description="Durée totale (s)", examples=[10.0])


class ViewTrackedOut(CamelModel):
    success: bool = True
    views: int


class WatchTrackedOut(CamelModel):
    success: bool = True
    average_completion: int
    total_watch_time: float


class AnalyticsOut(CamelModel):
    views: int
    total_watch_time: float
    duration: float
    average_completion: int
    watch_sessions: int = Field(description="Nombre d'échantillons de visionnage")
