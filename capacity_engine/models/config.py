from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class EngineConfig(BaseModel):
    """Configuração do motor de capacidade"""

    model_config = ConfigDict(populate_by_name=True)

    # Velocidade usada enquanto o time não tem nenhuma sprint concluída
    default_velocity: float = Field(default=1.0, gt=0, alias="defaultVelocity")
    success_threshold: float = Field(default=80.0, ge=0, alias="successThreshold")


class SetupConfig(BaseModel):
    """Configuração principal do sistema"""

    data_file: str
    output_dir: str = Field(default="output")
    team: Optional[str] = None
    engine: EngineConfig = Field(default_factory=EngineConfig)
