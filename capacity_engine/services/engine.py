import uuid
from datetime import date
from numbers import Real
from typing import Dict, List, Optional
from loguru import logger

from ..errors import InvalidDuration, InvalidStoryPoints, MissingActiveTeam, SprintNotFound
from ..models.config import EngineConfig
from ..models.entities import Resource, Sprint, WeekCell
from ..storage.repository import SprintRepository
from .calendar import initialize_sprint_resources, regenerate_daily_capacities
from .capacity import theoretical_capacity, total_capacity
from .overlap import validate_no_overlap
from .velocity import average_velocity, complete_sprint
from .week_grouper import group_by_week


class CapacityEngine:
    """Serviço responsável pelo planejamento e conclusão das sprints de um time"""

    def __init__(self, repository: SprintRepository, config: Optional[EngineConfig] = None):
        """
        Inicializa o motor de capacidade

        Args:
            repository: Repositório de recursos e sprints
            config: Configuração do motor (velocidade padrão, limite de sucesso)
        """
        self.repository = repository
        self.config = config or EngineConfig()

    def _validate_duration(self, duration) -> int:
        if isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
            raise InvalidDuration(duration)
        return duration

    def _validate_committed(self, story_points) -> float:
        if isinstance(story_points, bool) or not isinstance(story_points, Real) or not story_points > 0:
            raise InvalidStoryPoints(story_points, "o compromisso deve ser maior que zero")
        return float(story_points)

    def _get_sprint(self, sprint_id: str) -> Sprint:
        sprint = self.repository.get_sprint(sprint_id)
        if sprint is None:
            raise SprintNotFound(sprint_id)
        return sprint

    def average_velocity(self, team_id: str) -> float:
        """Velocidade média do time ou a velocidade padrão se não houver sprint concluída"""
        if not team_id:
            raise MissingActiveTeam()
        return average_velocity(
            self.repository.load_sprints(team_id),
            team_id,
            default=self.config.default_velocity,
        )

    def plan_sprint(
        self,
        team_id: str,
        start_date: date,
        duration: int,
        story_points_committed: float,
        objective: Optional[str] = None,
        resources: Optional[List[Resource]] = None,
        sprint_id: Optional[str] = None,
    ) -> Sprint:
        """
        Cria uma nova sprint para o time

        Args:
            team_id: Time da sprint
            start_date: Data de início
            duration: Duração em dias
            story_points_committed: Story points comprometidos
            objective: Objetivo da sprint
            resources: Recursos da sprint (por padrão, os recursos do time)
            sprint_id: Id da sprint (gerado se não informado)

        Returns:
            Sprint: Sprint gravada no repositório
        """
        if not team_id:
            raise MissingActiveTeam()
        duration = self._validate_duration(duration)
        committed = self._validate_committed(story_points_committed)

        existing = self.repository.load_sprints(team_id)
        end_date = validate_no_overlap(team_id, start_date, duration, existing)

        if resources is None:
            resources = self.repository.load_resources(team_id)
        sprint_resources = initialize_sprint_resources(resources, start_date, duration)

        velocity = average_velocity(existing, team_id, default=self.config.default_velocity)
        capacity = theoretical_capacity(velocity, sprint_resources, duration)

        sprint = Sprint(
            id=sprint_id or str(uuid.uuid4()),
            team_id=team_id,
            start_date=start_date,
            end_date=end_date,
            duration=duration,
            story_points_committed=committed,
            theoretical_capacity=capacity,
            resources=sprint_resources,
            objective=objective,
        )
        logger.info(
            f"Sprint {sprint.id} planejada para o time {team_id}: {start_date} a {end_date}, "
            f"{len(sprint_resources)} recursos, {total_capacity(sprint):.1f} dias-pessoa, "
            f"velocidade média {velocity:.2f}, capacidade teórica {capacity:.2f} SP"
        )
        return self.repository.save_sprint(sprint)

    def update_sprint(
        self,
        sprint_id: str,
        start_date: Optional[date] = None,
        duration: Optional[int] = None,
        story_points_committed: Optional[float] = None,
        resources: Optional[List[Resource]] = None,
        objective: Optional[str] = None,
        objective_achieved: Optional[bool] = None,
    ) -> Sprint:
        """
        Edita uma sprint existente

        As capacidades já informadas são preservadas para as datas que continuam
        no período e a capacidade teórica é recalculada. Os campos de conclusão
        nunca são apagados.
        """
        current = self._get_sprint(sprint_id)

        start_date = start_date or current.start_date
        duration = self._validate_duration(duration if duration is not None else current.duration)
        committed = current.story_points_committed
        if story_points_committed is not None:
            committed = self._validate_committed(story_points_committed)

        others = [s for s in self.repository.load_sprints(current.team_id) if s.id != sprint_id]
        end_date = validate_no_overlap(current.team_id, start_date, duration, others)

        base_resources = resources if resources is not None else current.resources
        sprint_resources = [
            regenerate_daily_capacities(resource, start_date, duration)
            for resource in base_resources
        ]

        velocity = average_velocity(others, current.team_id, default=self.config.default_velocity)
        updates = {
            "start_date": start_date,
            "end_date": end_date,
            "duration": duration,
            "story_points_committed": committed,
            "resources": sprint_resources,
            "theoretical_capacity": theoretical_capacity(velocity, sprint_resources, duration),
        }
        if objective is not None:
            updates["objective"] = objective
        if objective_achieved is not None:
            updates["objective_achieved"] = objective_achieved

        sprint = Sprint.model_validate({**current.model_dump(), **updates})
        logger.info(
            f"Sprint {sprint_id} atualizada: {start_date} a {end_date}, "
            f"compromisso {committed} SP, capacidade teórica {sprint.theoretical_capacity:.2f} SP"
        )
        return self.repository.save_sprint(sprint)

    def complete_sprint(self, sprint_id: str, story_points_completed) -> Sprint:
        """Conclui a sprint com os story points entregues"""
        current = self._get_sprint(sprint_id)
        sprint = complete_sprint(current, story_points_completed, self.config.success_threshold)
        logger.info(
            f"Sprint {sprint_id} concluída: {sprint.story_points_completed} SP, "
            f"velocidade {sprint.velocity_achieved:.2f}, compromisso {sprint.commitment_respected:.1f}%, "
            f"{'sucesso' if sprint.is_successful else 'falha'}"
        )
        return self.repository.save_sprint(sprint)

    def sprint_calendar(self, sprint_id: str) -> Dict[str, List[List[WeekCell]]]:
        """Calendário semanal de cada recurso da sprint, indexado pelo id do recurso"""
        sprint = self._get_sprint(sprint_id)
        return {resource.id: group_by_week(resource.daily_capacities) for resource in sprint.resources}
