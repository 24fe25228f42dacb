import pytest
import openpyxl
from datetime import date
from reportlab.platypus.tables import TableStyle
from capacity_engine.models.entities import Resource, Sprint
from capacity_engine.services.calendar import initialize_sprint_resources, set_daily_capacity
from capacity_engine.services.report import CapacityReportGenerator
from capacity_engine.services.velocity import complete_sprint

@pytest.fixture
def sprint():
    """Fixture para sprint de 10 dias com dois recursos"""
    resources = initialize_sprint_resources(
        [
            Resource(id="alice", name="Alice", capacity_per_day=1.0),
            Resource(id="bob", name="Bob", capacity_per_day=0.5),
        ],
        date(2024, 1, 1),
        10
    )
    resources[0] = set_daily_capacity(resources[0], date(2024, 1, 3), 0.5)
    return Sprint(
        id="s2",
        team_id="T",
        start_date=date(2024, 1, 1),
        duration=10,
        story_points_committed=30,
        theoretical_capacity=11.5,
        resources=resources,
        objective="Publicar a versão 1"
    )

@pytest.fixture
def history():
    """Fixture para sprint anterior concluída com sucesso"""
    previous = Sprint(
        id="s1",
        team_id="T",
        start_date=date(2023, 12, 11),
        duration=10,
        story_points_committed=30
    )
    return [complete_sprint(previous, 27)]

@pytest.fixture
def generator(sprint, history, tmp_path):
    """Fixture para o gerador de relatórios"""
    return CapacityReportGenerator(sprint, str(tmp_path), team_name="Time T", history=history)

def test_setup_styles(generator):
    """Testa a configuração dos estilos"""
    assert "CustomTitle" in generator.styles
    assert "CustomHeading1" in generator.styles
    assert "NormalWrap" in generator.styles
    assert "TableCell" in generator.styles
    assert "TableHeader" in generator.styles

def test_create_table_style(generator):
    """Testa a criação do estilo da tabela"""
    style = generator._create_table_style()

    assert isinstance(style, TableStyle)
    assert len(style.getCommands()) > 0

def test_count_working_days(generator):
    """Testa a contagem de dias úteis"""
    assert generator._count_working_days() == 8

def test_generate_markdown(generator):
    """Testa o conteúdo do relatório em Markdown"""
    content = generator._generate_markdown()

    assert "# Relatório de Capacidade - Sprint 01/01/2024 (Time T)" in content
    assert "- **Duração:** 10 dias (8 úteis)" in content
    assert "- **Dias-pessoa:** 11.5" in content
    assert "- **Situação:** Em andamento" in content
    assert "- **Objetivo:** Publicar a versão 1 (atingido: -)" in content
    assert "| Alice | 1 | 7.5 |" in content
    assert "| Bob | 0.5 | 4.0 |" in content
    assert "03/01: 0.5" in content
    assert "~~11/01~~" in content

def test_generate_markdown_history(generator):
    """Testa a seção de histórico do time"""
    content = generator._generate_markdown()

    assert "## 4. Histórico do Time" in content
    assert "| s1 | 11/12/2023 | 2.70 | 90% |" in content

def test_generate_markdown_without_history(sprint, tmp_path):
    """Testa o relatório de um time sem sprints concluídas"""
    content = CapacityReportGenerator(sprint, str(tmp_path))._generate_markdown()

    assert "(T)" in content
    assert "Histórico do Time" not in content

def test_generate_markdown_completed_sprint(sprint, tmp_path):
    """Testa o resumo de uma sprint concluída"""
    content = CapacityReportGenerator(complete_sprint(sprint, 15), str(tmp_path))._generate_markdown()

    assert "- **Situação:** Falha" in content
    assert "- **Velocidade atingida:** 1.50 SP/dia" in content
    assert "- **Compromisso respeitado:** 50.0%" in content

def test_generate_files(generator, tmp_path):
    """Testa a geração dos quatro arquivos"""
    paths = generator.generate()

    assert set(paths) == {"markdown", "html", "pdf", "excel"}
    for path in paths.values():
        assert path.exists()
        assert path.parent == tmp_path
        assert path.stem == "capacidade_sprint_2024-01-01_s2"
    assert "<table>" in paths["html"].read_text(encoding="utf-8")

def test_generate_excel(generator):
    """Testa a grade semanal no Excel"""
    path = generator._generate_excel()

    ws = openpyxl.load_workbook(path).active
    assert ws["A1"].value == "Alice (7.5 dias)"
    assert ws["A2"].value == "Seg"
    assert ws["C4"].value == 0.5
    assert ws["F4"].value == 0
    assert ws["D6"].value is None
