import pytest
from datetime import date
from capacity_engine.models.entities import DailyCapacity, Resource, Sprint
from capacity_engine.services.calendar import initialize_daily_capacities
from capacity_engine.services.capacity import (
    presence_days,
    resource_person_days,
    theoretical_capacity,
    total_capacity,
)

@pytest.fixture
def alice():
    """Fixture para recurso com calendário de 10 dias (8 dias de presença)"""
    resource = Resource(id="r1", name="Alice", capacity_per_day=1.0)
    return initialize_daily_capacities(resource, date(2024, 1, 1), 10)

@pytest.fixture
def bob():
    """Fixture para recurso em meio período sem calendário"""
    return Resource(id="r2", name="Bob", capacity_per_day=0.5)

@pytest.fixture
def sprint(alice, bob):
    """Fixture para sprint com os dois recursos"""
    return Sprint(
        id="s1",
        team_id="t1",
        start_date=date(2024, 1, 1),
        duration=10,
        story_points_committed=30,
        resources=[alice, bob]
    )

def test_presence_days(alice):
    """Testa a soma das capacidades diárias"""
    assert presence_days(alice) == 8

def test_presence_days_without_capacities(bob):
    """Testa que recurso sem calendário contribui com 0"""
    assert presence_days(bob) == 0
    assert presence_days(None) == 0

def test_presence_days_partial_values():
    """Testa a soma de capacidades fracionadas"""
    resource = Resource(
        id="r3",
        name="Carol",
        daily_capacities=[
            DailyCapacity(date=date(2024, 1, 1), capacity=0.5),
            DailyCapacity(date=date(2024, 1, 2), capacity=0.8),
            DailyCapacity(date=date(2024, 1, 3), capacity=0),
        ]
    )

    assert presence_days(resource) == pytest.approx(1.3)

def test_total_capacity(sprint):
    """Testa a soma dos dias de presença da sprint"""
    assert total_capacity(sprint) == 8

def test_total_capacity_without_resources():
    """Testa sprint sem recursos"""
    sprint = Sprint(id="s2", team_id="t1", start_date=date(2024, 1, 1), duration=5, story_points_committed=10)

    assert total_capacity(sprint) == 0
    assert total_capacity(None) == 0

def test_resource_person_days_uses_calendar(alice):
    """Testa que o calendário tem prioridade sobre a capacidade nominal"""
    assert resource_person_days(alice, 10) == 8

def test_resource_person_days_fallback_ignores_weekends(bob):
    """Testa o cálculo sem calendário: capacidade nominal × duração"""
    assert resource_person_days(bob, 10) == 5

def test_theoretical_capacity(alice, bob):
    """Testa a capacidade teórica: velocidade × dias-pessoa"""
    assert theoretical_capacity(2.0, [alice, bob], 10) == 26.0

def test_theoretical_capacity_rounding(alice):
    """Testa o arredondamento para 2 casas decimais"""
    assert theoretical_capacity(1 / 3, [alice], 10) == 2.67

def test_theoretical_capacity_without_resources():
    """Testa a capacidade teórica sem recursos"""
    assert theoretical_capacity(1.0, [], 10) == 0

@pytest.mark.parametrize("low,high", [(0.5, 1.0), (1.0, 1.0), (1.0, 4.2)])
def test_theoretical_capacity_monotonic_in_velocity(alice, bob, low, high):
    """Testa que a capacidade não diminui quando a velocidade aumenta"""
    assert theoretical_capacity(low, [alice, bob], 10) <= theoretical_capacity(high, [alice, bob], 10)

def test_theoretical_capacity_monotonic_in_presence(alice, bob):
    """Testa que a capacidade não diminui com mais dias de presença"""
    assert theoretical_capacity(1.5, [alice], 10) <= theoretical_capacity(1.5, [alice, bob], 10)
