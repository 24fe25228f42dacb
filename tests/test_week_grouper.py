import pytest
from datetime import date
from capacity_engine.models.entities import DailyCapacity
from capacity_engine.services.calendar import generate_dates
from capacity_engine.services.week_grouper import group_by_week, real_cells

def _capacities(dates, capacity=1.0):
    return [DailyCapacity(date=d, capacity=capacity) for d in dates]

@pytest.fixture
def ten_days():
    """Fixture para 10 dias a partir de uma segunda-feira"""
    return _capacities(generate_dates(date(2024, 1, 1), 10))

def _assert_full_weeks(weeks):
    for week in weeks:
        assert len(week) == 7
        assert [cell.date.weekday() for cell in week] == list(range(7))

def test_group_ten_days_from_monday(ten_days):
    """Testa o agrupamento de 10 dias iniciando na segunda"""
    weeks = group_by_week(ten_days)

    _assert_full_weeks(weeks)
    assert len(weeks) == 2
    assert all(cell.in_sprint_range for cell in weeks[0])
    assert [cell.in_sprint_range for cell in weeks[1]] == [True, True, True, False, False, False, False]
    assert weeks[1][3].date == date(2024, 1, 11)

def test_group_start_midweek():
    """Testa células vazias antes do primeiro dia da sprint"""
    weeks = group_by_week(_capacities(generate_dates(date(2024, 1, 3), 3)))

    assert len(weeks) == 1
    week = weeks[0]
    assert week[0].date == date(2024, 1, 1)
    assert [cell.in_sprint_range for cell in week] == [False, False, True, True, True, False, False]
    assert week[0].capacity == 0
    assert week[0].editable is False

def test_weekend_and_range_are_independent():
    """Testa que fim de semana e fora do período são atributos separados"""
    weeks = group_by_week(_capacities(generate_dates(date(2024, 1, 3), 4)))

    saturday, sunday = weeks[0][5], weeks[0][6]
    assert saturday.is_weekend is True and saturday.in_sprint_range is True
    assert sunday.is_weekend is True and sunday.in_sprint_range is False

def test_group_fills_gaps_inside_week():
    """Testa o preenchimento de lacunas entre datas não consecutivas"""
    entries = _capacities([date(2024, 1, 1), date(2024, 1, 4)])

    weeks = group_by_week(entries)

    assert len(weeks) == 1
    assert [cell.in_sprint_range for cell in weeks[0]] == [True, False, False, True, False, False, False]

def test_group_gap_across_weeks():
    """Testa uma lacuna que atravessa semanas sem passar por uma segunda-feira real"""
    entries = _capacities([date(2024, 1, 3), date(2024, 1, 10)])

    weeks = group_by_week(entries)

    _assert_full_weeks(weeks)
    assert len(weeks) == 2
    assert weeks[0][2].date == date(2024, 1, 3) and weeks[0][2].in_sprint_range
    assert weeks[1][2].date == date(2024, 1, 10) and weeks[1][2].in_sprint_range
    assert sum(cell.in_sprint_range for week in weeks for cell in week) == 2

def test_group_unsorted_input_is_not_mutated(ten_days):
    """Testa a ordenação sem alterar a lista recebida"""
    shuffled = list(reversed(ten_days))
    snapshot = list(shuffled)

    weeks = group_by_week(shuffled)

    assert shuffled == snapshot
    assert weeks == group_by_week(ten_days)

def test_group_keeps_capacity_values():
    """Testa que os valores de capacidade chegam às células reais"""
    entries = [
        DailyCapacity(date=date(2024, 1, 1), capacity=0.5),
        DailyCapacity(date=date(2024, 1, 2), capacity=0.8),
    ]

    week = group_by_week(entries)[0]

    assert week[0].capacity == 0.5
    assert week[1].capacity == 0.8
    assert week[0].editable is True

@pytest.mark.parametrize("entries", [None, []])
def test_group_empty(entries):
    """Testa o agrupamento sem capacidades"""
    assert group_by_week(entries) == []

@pytest.mark.parametrize("start,duration", [
    (date(2024, 1, 1), 14),
    (date(2024, 1, 4), 10),
    (date(2024, 1, 7), 1),
    (date(2024, 2, 25), 21),
])
def test_group_real_cells_count(start, duration):
    """Testa que nenhuma entrada real é perdida ou duplicada"""
    entries = _capacities(generate_dates(start, duration))

    weeks = group_by_week(entries)

    _assert_full_weeks(weeks)
    assert sum(cell.in_sprint_range for week in weeks for cell in week) == duration

def test_group_is_idempotent():
    """Testa que reagrupar as células reais reproduz o mesmo agrupamento"""
    entries = _capacities([date(2024, 1, 2), date(2024, 1, 5), date(2024, 1, 9), date(2024, 1, 20)], 0.5)

    weeks = group_by_week(entries)

    assert group_by_week(real_cells(weeks)) == weeks
    assert real_cells(weeks) == entries
