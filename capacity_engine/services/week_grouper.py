from datetime import date, timedelta
from typing import List, Optional, Sequence

from ..models.entities import DailyCapacity, WeekCell
from .calendar import is_weekend

DAYS_PER_WEEK = 7
WEEKDAY_LABELS = ["Seg", "Ter", "Qua", "Qui", "Sex", "Sáb", "Dom"]


def _placeholder(day: date) -> WeekCell:
    """Cria uma célula fora do período da sprint (somente leitura)"""
    return WeekCell(date=day, capacity=0.0, is_weekend=is_weekend(day), in_sprint_range=False)


def _real_cell(dc: DailyCapacity) -> WeekCell:
    return WeekCell(date=dc.date, capacity=dc.capacity, is_weekend=is_weekend(dc.date), in_sprint_range=True)


def _pad_week(week: List[WeekCell]) -> List[WeekCell]:
    """Completa a semana com células vazias até domingo"""
    while len(week) < DAYS_PER_WEEK:
        week.append(_placeholder(week[-1].date + timedelta(days=1)))
    return week


def group_by_week(daily_capacities: Optional[Sequence[DailyCapacity]]) -> List[List[WeekCell]]:
    """
    Agrupa as capacidades diárias em semanas de segunda a domingo

    As entradas são ordenadas por data. Dias anteriores ao primeiro dia real de
    uma semana, lacunas entre dois dias reais e os dias restantes da última
    semana viram células fora do período. A lista recebida não é alterada.

    Args:
        daily_capacities: Capacidades diárias de um recurso (em qualquer ordem)

    Returns:
        List[List[WeekCell]]: Semanas com exatamente 7 células cada
    """
    entries = sorted(daily_capacities or [], key=lambda dc: dc.date)

    weeks: List[List[WeekCell]] = []
    current: List[WeekCell] = []

    for dc in entries:
        if current:
            # Preenche a lacuna entre o último dia da semana e o próximo dia real
            next_day = current[-1].date + timedelta(days=1)
            while len(current) < DAYS_PER_WEEK and next_day < dc.date:
                current.append(_placeholder(next_day))
                next_day += timedelta(days=1)

            if len(current) >= DAYS_PER_WEEK or dc.date.weekday() == 0:
                weeks.append(_pad_week(current))
                current = []

        if not current:
            monday = dc.date - timedelta(days=dc.date.weekday())
            current = [_placeholder(monday + timedelta(days=i)) for i in range(dc.date.weekday())]

        current.append(_real_cell(dc))

    if current:
        weeks.append(_pad_week(current))

    return weeks


def real_cells(weeks: List[List[WeekCell]]) -> List[DailyCapacity]:
    """Retorna as capacidades das células que pertencem à sprint, na ordem do calendário"""
    return [
        DailyCapacity(date=cell.date, capacity=cell.capacity)
        for week in weeks
        for cell in week
        if cell.in_sprint_range
    ]
