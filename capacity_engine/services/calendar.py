from datetime import date, timedelta
from typing import List
from loguru import logger

from ..errors import InvalidDuration
from ..models.entities import DailyCapacity, Resource

# Valores pré-definidos para preencher os dias úteis de um recurso
PRESET_VALUES = {
    "vazio": 0.0,
    "meio_periodo": 0.5,
    "quatro_quintos": 0.8,
    "integral": 1.0,
}


def generate_dates(start_date: date, duration: int) -> List[date]:
    """
    Gera as datas consecutivas de uma sprint

    Args:
        start_date: Data de início (inclusive)
        duration: Duração em dias

    Returns:
        List[date]: Lista com exatamente `duration` datas
    """
    if isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
        raise InvalidDuration(duration)
    return [start_date + timedelta(days=i) for i in range(duration)]


def is_weekend(day: date) -> bool:
    """Verifica se a data cai no sábado ou domingo"""
    return day.isoweekday() >= 6


def default_capacity(resource: Resource, day: date) -> float:
    """Capacidade padrão do recurso no dia: 0 no fim de semana, nominal nos dias úteis"""
    return 0.0 if is_weekend(day) else resource.capacity_per_day


def initialize_daily_capacities(
    resource: Resource, start_date: date, duration: int, force: bool = False
) -> Resource:
    """
    Preenche as capacidades diárias de um recurso com os valores padrão

    Recursos que já possuem capacidades são devolvidos sem alteração,
    a menos que `force` seja informado.
    """
    dates = generate_dates(start_date, duration)
    if resource.daily_capacities and not force:
        return resource

    daily_capacities = [
        DailyCapacity(date=day, capacity=default_capacity(resource, day))
        for day in dates
    ]
    return resource.model_copy(update={"daily_capacities": daily_capacities})


def regenerate_daily_capacities(resource: Resource, start_date: date, duration: int) -> Resource:
    """
    Recalcula as capacidades diárias para um novo período

    Valores já informados para datas que continuam no período são mantidos;
    datas fora do novo período são descartadas e as novas recebem o valor padrão.

    Args:
        resource: Recurso com as capacidades atuais
        start_date: Nova data de início
        duration: Nova duração em dias

    Returns:
        Resource: Cópia do recurso com exatamente `duration` capacidades
    """
    dates = generate_dates(start_date, duration)
    previous = {dc.date: dc.capacity for dc in resource.daily_capacities or []}

    daily_capacities = []
    kept = 0
    for day in dates:
        if day in previous:
            daily_capacities.append(DailyCapacity(date=day, capacity=previous[day]))
            kept += 1
        else:
            daily_capacities.append(DailyCapacity(date=day, capacity=default_capacity(resource, day)))

    logger.info(
        f"Capacidades do recurso {resource.name} recalculadas: "
        f"{kept} mantidas, {len(dates) - kept} novas, {len(previous) - kept} descartadas"
    )
    return resource.model_copy(update={"daily_capacities": daily_capacities})


def initialize_sprint_resources(team_resources: List[Resource], start_date: date, duration: int) -> List[Resource]:
    """
    Gera as cópias dos recursos do time com o calendário da nova sprint

    Capacidades que o recurso já traz só são aproveitadas nas datas da nova
    sprint; as demais são descartadas.
    """
    return [
        regenerate_daily_capacities(resource.model_copy(deep=True), start_date, duration)
        for resource in team_resources
    ]


def apply_preset(resource: Resource, value: float) -> Resource:
    """
    Aplica um valor de capacidade a todos os dias úteis do recurso

    Args:
        resource: Recurso com capacidades diárias já geradas
        value: Capacidade a aplicar (ex: um dos PRESET_VALUES)

    Returns:
        Resource: Cópia do recurso com os dias úteis atualizados
    """
    if not resource.daily_capacities:
        return resource
    daily_capacities = [
        dc if is_weekend(dc.date) else DailyCapacity(date=dc.date, capacity=value)
        for dc in resource.daily_capacities
    ]
    return resource.model_copy(update={"daily_capacities": daily_capacities})


def set_daily_capacity(resource: Resource, day: date, capacity: float) -> Resource:
    """Altera a capacidade de um dia que pertence ao período da sprint"""
    if resource.capacity_on(day) is None:
        raise ValueError(f"Data {day.isoformat()} fora do período da sprint para o recurso {resource.name}")
    daily_capacities = [
        DailyCapacity(date=dc.date, capacity=capacity) if dc.date == day else dc
        for dc in resource.daily_capacities
    ]
    return resource.model_copy(update={"daily_capacities": daily_capacities})
