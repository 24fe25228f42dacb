from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from ..models.entities import Resource, Sprint, Team


class SprintRepository(ABC):
    """Fronteira de persistência usada pelo motor de capacidade"""

    @abstractmethod
    def load_resources(self, team_id: str) -> List[Resource]:
        """Retorna os recursos cadastrados para o time"""
        pass

    @abstractmethod
    def load_sprints(self, team_id: Optional[str] = None) -> List[Sprint]:
        """Retorna as sprints do time (ou de todos os times)"""
        pass

    @abstractmethod
    def save_sprint(self, sprint: Sprint) -> Sprint:
        """Grava a sprint (inclusão ou atualização pelo id)"""
        pass

    def load_teams(self) -> List[Team]:
        """Retorna os times conhecidos pelo repositório"""
        return []

    def get_sprint(self, sprint_id: str) -> Optional[Sprint]:
        """Busca uma sprint pelo id"""
        return next((s for s in self.load_sprints() if s.id == sprint_id), None)


class InMemoryRepository(SprintRepository):
    """Repositório em memória; sempre devolve cópias dos registros"""

    def __init__(self, teams: Optional[Iterable[Team]] = None, sprints: Optional[Iterable[Sprint]] = None):
        self._teams: Dict[str, Team] = {t.id: t.model_copy(deep=True) for t in teams or []}
        self._sprints: Dict[str, Sprint] = {s.id: s.model_copy(deep=True) for s in sprints or []}

    def load_teams(self) -> List[Team]:
        return [t.model_copy(deep=True) for t in self._teams.values()]

    def load_resources(self, team_id: str) -> List[Resource]:
        team = self._teams.get(team_id)
        if team is None:
            return []
        return [r.model_copy(deep=True) for r in team.resources]

    def load_sprints(self, team_id: Optional[str] = None) -> List[Sprint]:
        return [
            s.model_copy(deep=True)
            for s in self._sprints.values()
            if team_id is None or s.team_id == team_id
        ]

    def save_sprint(self, sprint: Sprint) -> Sprint:
        self._sprints[sprint.id] = sprint.model_copy(deep=True)
        return sprint
