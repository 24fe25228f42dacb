import pytest
from pydantic import ValidationError
from capacity_engine.models.config import EngineConfig, SetupConfig

def test_engine_config_defaults():
    """Testa os valores padrão da configuração do motor"""
    config = EngineConfig()

    assert config.default_velocity == 1.0
    assert config.success_threshold == 80.0

def test_engine_config_accepts_camel_case_option():
    """Testa a opção defaultVelocity reconhecida na configuração"""
    config = EngineConfig(**{"defaultVelocity": 2.5})

    assert config.default_velocity == 2.5

def test_engine_config_accepts_field_name():
    """Testa a criação pelo nome do campo"""
    config = EngineConfig(default_velocity=1.5)

    assert config.default_velocity == 1.5

def test_engine_config_rejects_non_positive_velocity():
    """Testa a rejeição de velocidade padrão menor ou igual a zero"""
    with pytest.raises(ValidationError):
        EngineConfig(default_velocity=0)

def test_setup_config_creation():
    """Testa a criação da configuração principal"""
    setup = SetupConfig(
        data_file="data/export.json",
        team="team-a",
        engine={"defaultVelocity": 3}
    )

    assert setup.data_file == "data/export.json"
    assert setup.output_dir == "output"
    assert setup.team == "team-a"
    assert setup.engine.default_velocity == 3

def test_setup_config_without_engine():
    """Testa a configuração sem a seção do motor"""
    setup = SetupConfig(data_file="data.json")

    assert setup.team is None
    assert setup.engine.default_velocity == 1.0

def test_setup_config_from_setup_json():
    """Testa a leitura do time padrão a partir do conteúdo do setup.json"""
    setup = SetupConfig.model_validate({
        "data_file": "data.json",
        "output_dir": "saida",
        "team": "T",
        "engine": {"successThreshold": 90},
    })

    assert setup.team == "T"
    assert setup.output_dir == "saida"
    assert setup.engine.success_threshold == 90
