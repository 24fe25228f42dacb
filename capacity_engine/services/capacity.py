from typing import Iterable, Optional

from ..models.entities import Resource, Sprint


def presence_days(resource: Optional[Resource]) -> float:
    """
    Soma as capacidades diárias de um recurso

    Um recurso sem capacidades diárias contribui com 0 dias de presença.
    """
    if resource is None or not resource.daily_capacities:
        return 0.0
    return sum((dc.capacity or 0.0) for dc in resource.daily_capacities if dc is not None)


def total_capacity(sprint: Optional[Sprint]) -> float:
    """Soma os dias de presença de todos os recursos da sprint (dias-pessoa)"""
    if sprint is None or not sprint.resources:
        return 0.0
    return sum(presence_days(resource) for resource in sprint.resources)


def resource_person_days(resource: Resource, duration: int) -> float:
    """
    Dias-pessoa de um recurso para o cálculo da capacidade teórica

    Usa as capacidades diárias quando existirem; caso contrário, usa
    capacity_per_day × duração, sem descontar fins de semana.
    """
    if resource.daily_capacities:
        return presence_days(resource)
    return resource.capacity_per_day * duration


def theoretical_capacity(average_velocity: float, resources: Iterable[Resource], duration: int) -> float:
    """
    Calcula a capacidade teórica da sprint em story points

    Args:
        average_velocity: Velocidade média do time (SP por dia-pessoa)
        resources: Recursos da sprint
        duration: Duração da sprint em dias

    Returns:
        float: Capacidade teórica arredondada para 2 casas decimais
    """
    person_days = sum(resource_person_days(resource, duration) for resource in resources or [])
    return round(average_velocity * person_days, 2)
