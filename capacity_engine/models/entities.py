import datetime
import math
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

# Percentual mínimo do compromisso para uma sprint ser considerada bem-sucedida
SUCCESS_THRESHOLD = 80.0


class SprintStatus(str, Enum):
    """Situações possíveis de uma sprint"""
    IN_PROGRESS = "in_progress"
    SUCCESS = "success"
    FAILURE = "failure"


class EngineModel(BaseModel):
    """Base dos registros trocados com o repositório e com a importação"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )


class DailyCapacity(EngineModel):
    """Capacidade de um recurso em um dia da sprint"""
    date: datetime.date
    capacity: float

    @field_validator("capacity")
    @classmethod
    def validate_capacity(cls, v: float) -> float:
        """Rejeita capacidades negativas ou não finitas"""
        if not math.isfinite(v):
            raise ValueError(f"Capacidade inválida: {v}. A capacidade diária deve ser um número finito")
        if v < 0:
            raise ValueError(f"Capacidade inválida: {v}. A capacidade diária não pode ser negativa")
        return v


class Resource(EngineModel):
    """Modelo de um recurso (pessoa) do time"""
    id: str
    name: str
    capacity_per_day: float = Field(default=1.0, ge=0)
    team_id: Optional[str] = None
    daily_capacities: Optional[List[DailyCapacity]] = None

    @field_validator("daily_capacities")
    @classmethod
    def validate_unique_dates(cls, v: Optional[List[DailyCapacity]]) -> Optional[List[DailyCapacity]]:
        """Garante que cada data aparece uma única vez"""
        if v is None:
            return v
        seen = set()
        for dc in v:
            if dc.date in seen:
                raise ValueError(f"Data duplicada nas capacidades diárias: {dc.date.isoformat()}")
            seen.add(dc.date)
        return v

    def capacity_on(self, day: datetime.date) -> Optional[float]:
        """Retorna a capacidade registrada para o dia ou None se não houver"""
        for dc in self.daily_capacities or []:
            if dc.date == day:
                return dc.capacity
        return None


class Team(EngineModel):
    """Modelo de um time Scrum"""
    id: str
    name: str
    manager_id: Optional[str] = None
    resources: List[Resource] = Field(default_factory=list)


class Sprint(EngineModel):
    """Representa uma sprint de um time"""
    id: str
    team_id: str
    start_date: datetime.date
    end_date: Optional[datetime.date] = None
    duration: int = Field(..., ge=1)
    story_points_committed: float = Field(..., gt=0)
    story_points_completed: Optional[float] = None
    theoretical_capacity: float = 0.0
    velocity_achieved: Optional[float] = None
    commitment_respected: Optional[float] = None
    is_successful: Optional[bool] = None
    resources: List[Resource] = Field(default_factory=list)
    objective: Optional[str] = None
    objective_achieved: Optional[bool] = None

    @model_validator(mode="after")
    def validate_sprint(self) -> "Sprint":
        """Valida a data de término e o estado de conclusão"""
        expected_end = self.start_date + datetime.timedelta(days=self.duration - 1)
        if self.end_date is None:
            self.end_date = expected_end
        elif self.end_date != expected_end:
            raise ValueError(
                f"Data de término inválida: {self.end_date.isoformat()}. "
                f"Esperado {expected_end.isoformat()} para {self.duration} dias"
            )

        completion = [
            self.story_points_completed,
            self.velocity_achieved,
            self.commitment_respected,
            self.is_successful,
        ]
        filled = [value is not None for value in completion]
        if any(filled) and not all(filled):
            raise ValueError(
                "Sprint parcialmente concluída: story points concluídos, velocidade, "
                "respeito ao compromisso e sucesso devem ser definidos juntos"
            )
        return self

    @property
    def is_completed(self) -> bool:
        """Verifica se a sprint já foi concluída"""
        return self.story_points_completed is not None

    @property
    def status(self) -> SprintStatus:
        """Situação exibida no indicador da sprint"""
        if self.story_points_completed is None:
            return SprintStatus.IN_PROGRESS
        if self.is_successful is None:
            commitment = self.story_points_completed / self.story_points_committed * 100
            successful = commitment >= SUCCESS_THRESHOLD
        else:
            successful = self.is_successful
        return SprintStatus.SUCCESS if successful else SprintStatus.FAILURE

    def get_resource(self, resource_id: str) -> Optional[Resource]:
        """Retorna o recurso da sprint pelo id"""
        return next((r for r in self.resources if r.id == resource_id), None)


class SprintCompletion(BaseModel):
    """Métricas calculadas na conclusão de uma sprint"""
    story_points_completed: float
    velocity_achieved: float
    commitment_respected: float
    is_successful: bool


class WeekCell(BaseModel):
    """Célula do calendário semanal de capacidade"""
    date: datetime.date
    capacity: float = 0.0
    is_weekend: bool
    in_sprint_range: bool

    @property
    def editable(self) -> bool:
        """Apenas dias dentro da sprint podem ser editados"""
        return self.in_sprint_range


class TeamVelocity(BaseModel):
    """Posição de um time no pódio de velocidade"""
    team_id: str
    team_name: str
    velocity: float
