from datetime import date, timedelta
from typing import Iterable, Optional
from loguru import logger

from ..errors import InvalidDuration, MissingActiveTeam, OverlappingSprint
from ..models.entities import Sprint


def compute_end_date(start_date: date, duration: int) -> date:
    """Data de término da sprint: início + duração - 1 dia"""
    if isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
        raise InvalidDuration(duration)
    return start_date + timedelta(days=duration - 1)


def ranges_overlap(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    """
    Verifica se dois períodos fechados têm ao menos um dia em comum

    Cobre início dentro do outro período, término dentro do outro período
    e um período contendo o outro.
    """
    return (
        (start_b <= start_a <= end_b)
        or (start_b <= end_a <= end_b)
        or (start_a <= start_b and end_a >= end_b)
    )


def validate_no_overlap(
    team_id: str,
    start_date: date,
    duration: int,
    existing_sprints: Iterable[Sprint],
    exclude_sprint_id: Optional[str] = None,
) -> date:
    """
    Garante que o período proposto não se sobrepõe a outra sprint do time

    Args:
        team_id: Time da nova sprint
        start_date: Data de início proposta
        duration: Duração proposta em dias
        existing_sprints: Sprints já cadastradas
        exclude_sprint_id: Sprint ignorada na verificação (a própria sprint em edição)

    Returns:
        date: Data de término calculada
    """
    if not team_id:
        raise MissingActiveTeam()

    end_date = compute_end_date(start_date, duration)
    for sprint in existing_sprints:
        if sprint.team_id != team_id or sprint.id == exclude_sprint_id:
            continue
        if ranges_overlap(start_date, end_date, sprint.start_date, sprint.end_date):
            logger.warning(
                f"Período {start_date} a {end_date} do time {team_id} "
                f"sobrepõe a sprint {sprint.id} ({sprint.start_date} a {sprint.end_date})"
            )
            raise OverlappingSprint(team_id, start_date, end_date, sprint.id)
    return end_date


def can_create_new_sprint(team_id: Optional[str], sprints: Iterable[Sprint]) -> bool:
    """Um time só abre nova sprint quando todas as anteriores estão concluídas"""
    if not team_id:
        raise MissingActiveTeam()
    return all(s.is_completed for s in sprints if s.team_id == team_id)
