import math
from numbers import Real
from typing import Dict, Iterable, List, Optional

from ..errors import InvalidStoryPoints
from ..models.entities import SUCCESS_THRESHOLD, Sprint, SprintCompletion, SprintStatus, Team, TeamVelocity


def _validate_story_points(value) -> float:
    """Valida o valor informado na conclusão da sprint"""
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidStoryPoints(value, "não é um número")
    if math.isnan(value) or math.isinf(value):
        raise InvalidStoryPoints(value, "não é um número finito")
    if value < 0:
        raise InvalidStoryPoints(value)
    return float(value)


def evaluate_completion(
    sprint: Sprint, story_points_completed, success_threshold: float = SUCCESS_THRESHOLD
) -> SprintCompletion:
    """
    Calcula as métricas de conclusão de uma sprint

    Args:
        sprint: Sprint a ser concluída
        story_points_completed: Story points efetivamente entregues
        success_threshold: Percentual mínimo de compromisso para sucesso

    Returns:
        SprintCompletion: Velocidade, respeito ao compromisso e sucesso
    """
    completed = _validate_story_points(story_points_completed)
    commitment = completed / sprint.story_points_committed * 100
    return SprintCompletion(
        story_points_completed=completed,
        velocity_achieved=completed / sprint.duration,
        commitment_respected=commitment,
        is_successful=commitment >= success_threshold,
    )


def complete_sprint(sprint: Sprint, story_points_completed, success_threshold: float = SUCCESS_THRESHOLD) -> Sprint:
    """Retorna uma cópia da sprint com os quatro campos de conclusão preenchidos juntos"""
    completion = evaluate_completion(sprint, story_points_completed, success_threshold)
    return sprint.model_copy(update=completion.model_dump(), deep=True)


def _team_sprints(sprints: Iterable[Sprint], team_id: Optional[str]) -> List[Sprint]:
    return [s for s in sprints if team_id is None or s.team_id == team_id]


def average_velocity(
    sprints: Iterable[Sprint], team_id: Optional[str] = None, default: Optional[float] = None
) -> Optional[float]:
    """
    Média da velocidade atingida nas sprints concluídas do time

    Sprints em andamento (sem velocidade) ficam fora da média. Sem nenhuma
    sprint concluída, retorna `default`.
    """
    velocities = [
        s.velocity_achieved
        for s in _team_sprints(sprints, team_id)
        if s.velocity_achieved is not None
    ]
    if not velocities:
        return default
    return sum(velocities) / len(velocities)


def sprint_status(sprint: Sprint, success_threshold: float = SUCCESS_THRESHOLD) -> SprintStatus:
    """Situação da sprint; o limite só é usado quando o indicador de sucesso não foi gravado"""
    if sprint.is_completed and sprint.is_successful is None:
        commitment = sprint.story_points_completed / sprint.story_points_committed * 100
        return SprintStatus.SUCCESS if commitment >= success_threshold else SprintStatus.FAILURE
    return sprint.status


def velocity_history(sprints: Iterable[Sprint], team_id: Optional[str] = None) -> List[Dict]:
    """Série de velocidade das sprints bem-sucedidas, ordenada pela data de início"""
    points = [
        s for s in _team_sprints(sprints, team_id)
        if s.is_successful and s.velocity_achieved is not None
    ]
    points.sort(key=lambda s: s.start_date)
    return [
        {"sprint_id": s.id, "start_date": s.start_date, "velocity": s.velocity_achieved}
        for s in points
    ]


def commitment_history(sprints: Iterable[Sprint], team_id: Optional[str] = None) -> List[Dict]:
    """Série de respeito ao compromisso (%) das sprints concluídas"""
    points = [s for s in _team_sprints(sprints, team_id) if s.story_points_completed is not None]
    points.sort(key=lambda s: s.start_date)
    return [
        {
            "sprint_id": s.id,
            "start_date": s.start_date,
            "percentage": round(s.story_points_completed / s.story_points_committed * 100),
        }
        for s in points
    ]


def recent_velocity(sprints: Iterable[Sprint], team_id: str, window: int = 3) -> float:
    """Velocidade média das últimas `window` sprints bem-sucedidas do time"""
    successful = [
        s for s in _team_sprints(sprints, team_id)
        if s.is_successful and s.velocity_achieved is not None
    ]
    successful.sort(key=lambda s: s.start_date, reverse=True)
    latest = successful[:window]
    if not latest:
        return 0.0
    return sum(s.velocity_achieved for s in latest) / len(latest)


def team_podium(teams: Iterable[Team], sprints: Iterable[Sprint], limit: int = 3, window: int = 3) -> List[TeamVelocity]:
    """
    Classifica os times pela velocidade recente

    Args:
        teams: Times a classificar
        sprints: Sprints de todos os times
        limit: Quantidade de posições do pódio
        window: Quantidade de sprints bem-sucedidas consideradas por time

    Returns:
        List[TeamVelocity]: Times em ordem decrescente de velocidade
    """
    sprints = list(sprints)
    ranking = [
        TeamVelocity(team_id=team.id, team_name=team.name, velocity=recent_velocity(sprints, team.id, window))
        for team in teams
    ]
    ranking.sort(key=lambda t: t.velocity, reverse=True)
    return ranking[:limit]
