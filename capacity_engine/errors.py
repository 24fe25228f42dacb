from datetime import date
from typing import Optional


class CapacityEngineError(Exception):
    """Erro base do motor de capacidade"""


class InvalidDuration(CapacityEngineError):
    """Duração de sprint menor ou igual a zero"""

    def __init__(self, duration):
        self.duration = duration
        super().__init__(f"Duração inválida: {duration}. A sprint deve ter pelo menos 1 dia")


class InvalidStoryPoints(CapacityEngineError):
    """Valor de story points negativo ou não numérico"""

    def __init__(self, value, reason: str = "deve ser um número maior ou igual a zero"):
        self.value = value
        super().__init__(f"Story points inválidos: {value!r} ({reason})")


class OverlappingSprint(CapacityEngineError):
    """O período proposto se sobrepõe a uma sprint existente do mesmo time"""

    def __init__(self, team_id: str, start_date: date, end_date: date, conflicting_sprint_id: Optional[str] = None):
        self.team_id = team_id
        self.start_date = start_date
        self.end_date = end_date
        self.conflicting_sprint_id = conflicting_sprint_id
        super().__init__(
            f"As datas da sprint ({start_date.isoformat()} a {end_date.isoformat()}) "
            f"se sobrepõem à sprint {conflicting_sprint_id} do time {team_id}"
        )


class MissingActiveTeam(CapacityEngineError):
    """Operação solicitada sem um time selecionado"""

    def __init__(self):
        super().__init__("Nenhum time selecionado. Informe o time antes de continuar")


class SprintNotFound(CapacityEngineError):
    """Sprint inexistente no repositório"""

    def __init__(self, sprint_id: str):
        self.sprint_id = sprint_id
        super().__init__(f"Sprint {sprint_id} não encontrada")
