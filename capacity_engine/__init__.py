"""
Motor de Capacidade de Sprints

Este pacote transforma o período de uma sprint e os recursos de um time Scrum
em um calendário de capacidade diária, calcula a capacidade teórica em story
points e deriva as métricas de velocidade, respeito ao compromisso e sucesso
usadas nos gráficos e indicadores de cada time.
"""

__version__ = "1.0.0"
