import json
from pathlib import Path
from typing import Dict, List, Optional
from loguru import logger
from pydantic.alias_generators import to_camel

from ..models.entities import DailyCapacity, Resource, Sprint, Team
from .repository import SprintRepository

TABLES = ("teams", "resources", "sprints", "sprint_resources")


def _get(row: dict, field: str, default=None):
    """Lê o campo em snake_case ou, na exportação em camelCase, pelo seu alias"""
    if field in row:
        return row[field]
    return row.get(to_camel(field), default)


class JsonFileRepository(SprintRepository):
    """
    Repositório baseado no arquivo JSON de exportação

    O documento segue as tabelas do banco de dados: `teams`, `resources`,
    `sprints` e `sprint_resources` (capacidades diárias por sprint e recurso).
    """

    def __init__(self, path: Path):
        """
        Inicializa o repositório

        Args:
            path: Caminho do arquivo JSON (criado na primeira gravação se não existir)
        """
        self.path = Path(path)
        logger.info(f"Repositório JSON inicializado em {self.path}")

    def _read(self) -> Dict[str, List[dict]]:
        """Carrega o documento, garantindo todas as tabelas"""
        if not self.path.exists():
            return {table: [] for table in TABLES}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        for table in TABLES:
            data.setdefault(table, [])
        return data

    def _write(self, data: Dict[str, List[dict]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")

    def load_teams(self) -> List[Team]:
        data = self._read()
        return [
            Team(
                id=row["id"],
                name=row.get("name", ""),
                manager_id=_get(row, "manager_id"),
                resources=[
                    Resource.model_validate(r)
                    for r in data["resources"]
                    if str(_get(r, "team_id")) == str(row["id"])
                ],
            )
            for row in data["teams"]
        ]

    def load_resources(self, team_id: str) -> List[Resource]:
        data = self._read()
        resources = [
            Resource.model_validate(row)
            for row in data["resources"]
            if str(_get(row, "team_id")) == str(team_id)
        ]
        logger.info(f"Obtidos {len(resources)} recursos do time {team_id}")
        return resources

    def load_sprints(self, team_id: Optional[str] = None) -> List[Sprint]:
        data = self._read()
        directory = {str(r["id"]): r for r in data["resources"]}

        sprints = []
        for row in data["sprints"]:
            if team_id is not None and str(_get(row, "team_id")) != str(team_id):
                continue
            resources = [
                self._convert_sprint_resource(sr, directory)
                for sr in data["sprint_resources"]
                if str(_get(sr, "sprint_id")) == str(row["id"])
            ]
            sprints.append(Sprint.model_validate({**row, "resources": resources}))
        return sprints

    def _convert_sprint_resource(self, row: dict, directory: Dict[str, dict]) -> Resource:
        """Monta o recurso da sprint a partir da linha de sprint_resources"""
        resource_id = _get(row, "resource_id")
        base = directory.get(str(resource_id), {})
        return Resource(
            id=resource_id,
            name=row.get("name") or base.get("name") or str(resource_id),
            capacity_per_day=_get(row, "capacity_per_day", _get(base, "capacity_per_day", 1.0)),
            team_id=_get(base, "team_id"),
            daily_capacities=[DailyCapacity.model_validate(dc) for dc in _get(row, "daily_capacities") or []],
        )

    def save_sprint(self, sprint: Sprint) -> Sprint:
        data = self._read()

        row = sprint.model_dump(mode="json", exclude={"resources"})
        data["sprints"] = [s for s in data["sprints"] if str(s["id"]) != sprint.id] + [row]

        data["sprint_resources"] = [
            sr for sr in data["sprint_resources"] if str(_get(sr, "sprint_id")) != sprint.id
        ] + [
            {
                "sprint_id": sprint.id,
                "resource_id": resource.id,
                "name": resource.name,
                "capacity_per_day": resource.capacity_per_day,
                "daily_capacities": [
                    dc.model_dump(mode="json") for dc in resource.daily_capacities or []
                ],
            }
            for resource in sprint.resources
        ]

        self._write(data)
        logger.info(f"Sprint {sprint.id} gravada em {self.path}")
        return sprint
