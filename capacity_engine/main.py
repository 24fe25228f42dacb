import json
from datetime import date, datetime
from pathlib import Path
from typing import Optional, Tuple
import typer
from loguru import logger
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from .errors import CapacityEngineError, MissingActiveTeam, SprintNotFound
from .models.config import SetupConfig
from .services.engine import CapacityEngine
from .services.report import CapacityReportGenerator
from .services.overlap import can_create_new_sprint
from .services.velocity import sprint_status, team_podium
from .services.week_grouper import WEEKDAY_LABELS
from .storage.json_store import JsonFileRepository

app = typer.Typer(help="Motor de Capacidade de Sprints - Planejamento e Métricas dos Times")
console = Console()


def configurar_logger(output_dir: Path = Path("logs")):
    """Configura o sistema de logs"""
    output_dir.mkdir(parents=True, exist_ok=True)

    logger.remove()  # Remove handlers padrão
    logger.add(
        output_dir / "capacidade_{time}.log",
        rotation="1 day",
        retention="7 days",
        level="INFO",
        encoding="utf-8"
    )
    logger.add(lambda msg: console.print(msg, style="blue", markup=False, end=""), level="INFO")


def load_json_file(path: Path) -> dict:
    """
    Carrega um arquivo JSON

    Args:
        path: Caminho do arquivo

    Returns:
        dict: Conteúdo do arquivo
    """
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Erro ao carregar arquivo {path}: {str(e)}")
        raise typer.Exit(1)


def parse_date(value: str) -> date:
    """Converte a string YYYY-MM-DD em data"""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as e:
        raise typer.BadParameter(f"Data inválida: {value}. Formato esperado: YYYY-MM-DD") from e


def carregar_contexto(config_dir: Path) -> Tuple[SetupConfig, JsonFileRepository, CapacityEngine]:
    """Carrega o setup.json e monta o repositório e o motor de capacidade"""
    setup = SetupConfig(**load_json_file(config_dir / "setup.json"))
    configurar_logger(Path(setup.output_dir) / "logs")
    logger.info(f"Usando diretório de configuração: {config_dir}")

    repository = JsonFileRepository(Path(setup.data_file))
    engine = CapacityEngine(repository, setup.engine)
    return setup, repository, engine


def resolver_time(setup: SetupConfig, time: Optional[str]) -> str:
    """Time informado na linha de comando ou o time padrão do setup"""
    team_id = time or setup.team
    if not team_id:
        raise MissingActiveTeam()
    return team_id


CONFIG_DIR_OPTION = typer.Option(
    "config",
    help="Diretório com os arquivos de configuração",
    exists=True,
    dir_okay=True,
    file_okay=False
)


@app.command()
def criar(
    inicio: str = typer.Option(..., help="Data de início (YYYY-MM-DD)"),
    duracao: int = typer.Option(..., help="Duração da sprint em dias"),
    compromisso: float = typer.Option(..., help="Story points comprometidos"),
    time: Optional[str] = typer.Option(None, help="Id do time (padrão: time do setup.json)"),
    objetivo: Optional[str] = typer.Option(None, help="Objetivo da sprint"),
    config_dir: Path = CONFIG_DIR_OPTION,
):
    """Cria uma nova sprint com o calendário de capacidade do time"""
    try:
        setup, repository, engine = carregar_contexto(config_dir)
        team_id = resolver_time(setup, time)
        if not can_create_new_sprint(team_id, repository.load_sprints(team_id)):
            logger.warning(f"O time {team_id} possui sprint não concluída; conclua-a antes de abrir uma nova")
        sprint = engine.plan_sprint(
            team_id=team_id,
            start_date=parse_date(inicio),
            duration=duracao,
            story_points_committed=compromisso,
            objective=objetivo,
        )
        console.print(
            f"Sprint {sprint.id} criada: {sprint.start_date} a {sprint.end_date}, "
            f"capacidade teórica {sprint.theoretical_capacity:.2f} SP",
            markup=False,
        )
    except (CapacityEngineError, ValidationError) as e:
        logger.error(f"Erro ao criar sprint: {str(e)}")
        raise typer.Exit(1)


@app.command()
def editar(
    sprint_id: str = typer.Argument(..., help="Id da sprint"),
    inicio: Optional[str] = typer.Option(None, help="Nova data de início (YYYY-MM-DD)"),
    duracao: Optional[int] = typer.Option(None, help="Nova duração em dias"),
    compromisso: Optional[float] = typer.Option(None, help="Novos story points comprometidos"),
    objetivo: Optional[str] = typer.Option(None, help="Objetivo da sprint"),
    objetivo_atingido: Optional[bool] = typer.Option(None, help="Objetivo atingido"),
    config_dir: Path = CONFIG_DIR_OPTION,
):
    """Edita datas, compromisso ou objetivo de uma sprint"""
    try:
        _, _, engine = carregar_contexto(config_dir)
        sprint = engine.update_sprint(
            sprint_id,
            start_date=parse_date(inicio) if inicio else None,
            duration=duracao,
            story_points_committed=compromisso,
            objective=objetivo,
            objective_achieved=objetivo_atingido,
        )
        console.print(
            f"Sprint {sprint.id} atualizada: capacidade teórica {sprint.theoretical_capacity:.2f} SP",
            markup=False,
        )
    except (CapacityEngineError, ValidationError) as e:
        logger.error(f"Erro ao editar sprint: {str(e)}")
        raise typer.Exit(1)


@app.command()
def concluir(
    sprint_id: str = typer.Argument(..., help="Id da sprint"),
    pontos: float = typer.Option(..., help="Story points concluídos"),
    config_dir: Path = CONFIG_DIR_OPTION,
):
    """Conclui a sprint e calcula velocidade, compromisso e sucesso"""
    try:
        _, _, engine = carregar_contexto(config_dir)
        sprint = engine.complete_sprint(sprint_id, pontos)
        console.print(
            f"Sprint {sprint.id}: velocidade {sprint.velocity_achieved:.2f} SP/dia, "
            f"compromisso {sprint.commitment_respected:.1f}%, "
            f"{'sucesso' if sprint.is_successful else 'falha'}",
            markup=False,
        )
    except (CapacityEngineError, ValidationError) as e:
        logger.error(f"Erro ao concluir sprint: {str(e)}")
        raise typer.Exit(1)


@app.command()
def calendario(
    sprint_id: str = typer.Argument(..., help="Id da sprint"),
    config_dir: Path = CONFIG_DIR_OPTION,
):
    """Exibe o calendário semanal de capacidade de cada recurso"""
    try:
        _, repository, engine = carregar_contexto(config_dir)
        sprint = repository.get_sprint(sprint_id)
        if sprint is None:
            raise SprintNotFound(sprint_id)
        calendars = engine.sprint_calendar(sprint_id)
    except (CapacityEngineError, ValidationError) as e:
        logger.error(f"Erro ao montar calendário: {str(e)}")
        raise typer.Exit(1)

    for resource in sprint.resources:
        table = Table(title=f"{resource.name} ({resource.capacity_per_day:g}/dia)")
        for label in WEEKDAY_LABELS:
            table.add_column(label, justify="center")
        for week in calendars[resource.id]:
            row = []
            for cell in week:
                if not cell.in_sprint_range:
                    row.append(f"[dim]{cell.date.strftime('%d/%m')}[/dim]")
                elif cell.is_weekend:
                    row.append(f"[red]{cell.date.strftime('%d/%m')}\n{cell.capacity:g}[/red]")
                else:
                    row.append(f"{cell.date.strftime('%d/%m')}\n{cell.capacity:g}")
            table.add_row(*row)
        console.print(table)


@app.command()
def relatorio(
    sprint_id: str = typer.Argument(..., help="Id da sprint"),
    config_dir: Path = CONFIG_DIR_OPTION,
):
    """Gera o relatório de capacidade da sprint (Markdown, HTML, PDF e Excel)"""
    try:
        setup, repository, _ = carregar_contexto(config_dir)
        sprint = repository.get_sprint(sprint_id)
        if sprint is None:
            raise SprintNotFound(sprint_id)
        team_name = next((t.name for t in repository.load_teams() if t.id == sprint.team_id), None)
        logger.info("Gerando relatório...")
        generator = CapacityReportGenerator(
            sprint,
            setup.output_dir,
            team_name=team_name,
            history=repository.load_sprints(sprint.team_id),
        )
        paths = generator.generate()
        logger.info(f"Relatórios gerados: {', '.join(str(p) for p in paths.values())}")
    except (CapacityEngineError, ValidationError) as e:
        logger.error(f"Erro ao gerar relatório: {str(e)}")
        raise typer.Exit(1)


@app.command()
def velocidade(
    time: Optional[str] = typer.Option(None, help="Id do time (padrão: time do setup.json)"),
    config_dir: Path = CONFIG_DIR_OPTION,
):
    """Mostra a velocidade média do time, suas sprints e o pódio dos times"""
    try:
        setup, repository, engine = carregar_contexto(config_dir)
        team_id = resolver_time(setup, time)
        average = engine.average_velocity(team_id)
        sprints = sorted(repository.load_sprints(team_id), key=lambda s: s.start_date)
        podium = team_podium(repository.load_teams(), repository.load_sprints())
    except (CapacityEngineError, ValidationError) as e:
        logger.error(f"Erro ao calcular velocidade: {str(e)}")
        raise typer.Exit(1)

    console.print(f"Velocidade média do time {team_id}: {average:.2f} SP/dia", markup=False)

    table = Table(title="Sprints")
    for column in ("Início", "Fim", "Compromisso", "Concluído", "Velocidade", "Situação"):
        table.add_column(column)
    for sprint in sprints:
        table.add_row(
            sprint.start_date.strftime("%d/%m/%Y"),
            sprint.end_date.strftime("%d/%m/%Y"),
            f"{sprint.story_points_committed:g}",
            f"{sprint.story_points_completed:g}" if sprint.is_completed else "-",
            f"{sprint.velocity_achieved:.2f}" if sprint.is_completed else "-",
            sprint_status(sprint).value,
        )
    console.print(table)

    for position, entry in enumerate(podium, start=1):
        console.print(f"{position}º {entry.team_name}: {entry.velocity:.2f} SP/dia", markup=False)


if __name__ == "__main__":
    app()
