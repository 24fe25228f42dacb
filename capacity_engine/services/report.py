from datetime import date
from pathlib import Path
from typing import Dict, List, Optional
from loguru import logger
import markdown
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import LongTable, Paragraph, SimpleDocTemplate, Spacer, TableStyle
from reportlab.platypus.flowables import KeepTogether
import openpyxl
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from ..models.entities import Sprint, SprintStatus, WeekCell
from .calendar import generate_dates, is_weekend
from .capacity import presence_days, total_capacity
from .velocity import commitment_history, sprint_status, velocity_history
from .week_grouper import WEEKDAY_LABELS, group_by_week

STATUS_LABELS = {
    SprintStatus.IN_PROGRESS: "Em andamento",
    SprintStatus.SUCCESS: "Sucesso",
    SprintStatus.FAILURE: "Falha",
}

HEADER_COLOR = "#1F4E79"


def _fmt(day: date) -> str:
    return day.strftime("%d/%m/%Y")


class CapacityReportGenerator:
    """Serviço responsável pela geração do relatório de capacidade da sprint"""

    def __init__(self, sprint: Sprint, output_dir: str, team_name: Optional[str] = None, history: Optional[List[Sprint]] = None):
        """
        Inicializa o gerador de relatórios

        Args:
            sprint: Sprint a ser relatada
            output_dir: Diretório de saída dos relatórios
            team_name: Nome do time (padrão: id do time da sprint)
            history: Sprints do time usadas nas séries de velocidade e compromisso
        """
        self.sprint = sprint
        self.output_dir = Path(output_dir)
        self.team_name = team_name or sprint.team_id
        self.history = history or []

        self.output_dir.mkdir(parents=True, exist_ok=True)

        self.styles = getSampleStyleSheet()
        self._setup_styles()

        self.excel_colors = {
            "weekend": PatternFill(start_color="FFB3B3", end_color="FFB3B3", fill_type="solid"),   # Vermelho claro
            "outside": PatternFill(start_color="D9D9D9", end_color="D9D9D9", fill_type="solid"),   # Cinza
            "full": PatternFill(start_color="B3FFB3", end_color="B3FFB3", fill_type="solid"),      # Verde claro
            "partial": PatternFill(start_color="B3D1FF", end_color="B3D1FF", fill_type="solid"),   # Azul claro
            "empty": PatternFill(start_color="FFFFB3", end_color="FFFFB3", fill_type="solid"),     # Amarelo claro
        }

    @property
    def base_name(self) -> str:
        return f"capacidade_sprint_{self.sprint.start_date.isoformat()}_{self.sprint.id}"

    def _setup_styles(self):
        """Configura estilos personalizados para o relatório"""
        self.styles.add(ParagraphStyle(
            name="CustomTitle",
            parent=self.styles["Title"],
            fontSize=16,
            spaceAfter=24,
            textColor=colors.HexColor(HEADER_COLOR),
            alignment=TA_CENTER,
        ))
        self.styles.add(ParagraphStyle(
            name="CustomHeading1",
            parent=self.styles["Heading1"],
            fontSize=14,
            spaceAfter=12,
            textColor=colors.HexColor(HEADER_COLOR),
            alignment=TA_LEFT,
        ))
        self.styles.add(ParagraphStyle(
            name="NormalWrap",
            parent=self.styles["Normal"],
            fontSize=10,
            leading=12,
            spaceAfter=6,
            alignment=TA_LEFT,
        ))
        self.styles.add(ParagraphStyle(
            name="TableCell",
            parent=self.styles["Normal"],
            fontSize=9,
            leading=11,
            alignment=TA_LEFT,
        ))
        self.styles.add(ParagraphStyle(
            name="TableHeader",
            parent=self.styles["Normal"],
            fontSize=10,
            leading=12,
            alignment=TA_LEFT,
            fontName="Helvetica-Bold",
            textColor=colors.white,
        ))

    def _create_table_style(self, header_bg_color=colors.HexColor(HEADER_COLOR)):
        """Cria um estilo padrão para as tabelas"""
        return TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), header_bg_color),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("ALIGN", (0, 0), (-1, -1), "LEFT"),
            ("GRID", (0, 0), (-1, -1), 1, colors.black),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("LEFTPADDING", (0, 0), (-1, -1), 6),
            ("RIGHTPADDING", (0, 0), (-1, -1), 6),
            ("TOPPADDING", (0, 0), (-1, -1), 6),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#EAF1FB")]),
        ])

    def _count_working_days(self) -> int:
        """Conta os dias úteis da sprint (excluindo finais de semana)"""
        return sum(
            1 for day in generate_dates(self.sprint.start_date, self.sprint.duration)
            if not is_weekend(day)
        )

    def _summary_rows(self) -> List[List[str]]:
        """Linhas (métrica, valor) do resumo da sprint"""
        sprint = self.sprint
        rows = [
            ["Time", self.team_name],
            ["Período", f"{_fmt(sprint.start_date)} a {_fmt(sprint.end_date)}"],
            ["Duração", f"{sprint.duration} dias ({self._count_working_days()} úteis)"],
            ["Dias-pessoa", f"{total_capacity(sprint):.1f}"],
            ["Capacidade teórica", f"{sprint.theoretical_capacity:.2f} SP"],
            ["Story points comprometidos", f"{sprint.story_points_committed:g}"],
            ["Situação", STATUS_LABELS[sprint_status(sprint)]],
        ]
        if sprint.is_completed:
            rows.extend([
                ["Story points concluídos", f"{sprint.story_points_completed:g}"],
                ["Velocidade atingida", f"{sprint.velocity_achieved:.2f} SP/dia"],
                ["Compromisso respeitado", f"{sprint.commitment_respected:.1f}%"],
            ])
        if sprint.objective:
            achieved = {True: "sim", False: "não", None: "-"}[sprint.objective_achieved]
            rows.append(["Objetivo", f"{sprint.objective} (atingido: {achieved})"])
        return rows

    def _resource_rows(self) -> List[List[str]]:
        """Linhas da tabela de capacidade por recurso"""
        return [
            [resource.name, f"{resource.capacity_per_day:g}", f"{presence_days(resource):.1f}"]
            for resource in sorted(self.sprint.resources, key=lambda r: r.name)
        ]

    def _generate_markdown(self) -> str:
        """Gera o conteúdo do relatório em Markdown"""
        report = []

        report.append(f"# Relatório de Capacidade - Sprint {_fmt(self.sprint.start_date)} ({self.team_name})")
        report.append("")

        report.append("## 1. Resumo da Sprint")
        report.append("")
        for label, value in self._summary_rows():
            report.append(f"- **{label}:** {value}")
        report.append("")

        report.append("## 2. Capacidade dos Recursos")
        report.append("")
        report.append("| Recurso | Capacidade/dia | Dias de presença |")
        report.append("|---------|----------------|------------------|")
        for name, per_day, presence in self._resource_rows():
            report.append(f"| {name} | {per_day} | {presence} |")
        report.append("")

        report.append("## 3. Calendário de Capacidade")
        report.append("")
        for resource in sorted(self.sprint.resources, key=lambda r: r.name):
            report.append(f"### {resource.name}")
            report.append("")
            report.append("| " + " | ".join(WEEKDAY_LABELS) + " |")
            report.append("|" + "---|" * len(WEEKDAY_LABELS))
            for week in group_by_week(resource.daily_capacities):
                report.append("| " + " | ".join(self._markdown_cell(cell) for cell in week) + " |")
            report.append("")

        velocities = velocity_history(self.history, self.sprint.team_id)
        commitments = commitment_history(self.history, self.sprint.team_id)
        if velocities or commitments:
            report.append("## 4. Histórico do Time")
            report.append("")
            report.append("| Sprint | Início | Velocidade | Compromisso |")
            report.append("|--------|--------|------------|-------------|")
            velocity_by_id = {v["sprint_id"]: v["velocity"] for v in velocities}
            for point in commitments:
                velocity = velocity_by_id.get(point["sprint_id"])
                velocity_label = f"{velocity:.2f}" if velocity is not None else "-"
                report.append(
                    f"| {point['sprint_id']} | {_fmt(point['start_date'])} | "
                    f"{velocity_label} | {point['percentage']}% |"
                )
            report.append("")

        return "\n".join(report)

    def _markdown_cell(self, cell: WeekCell) -> str:
        if not cell.in_sprint_range:
            return f"~~{cell.date.strftime('%d/%m')}~~"
        return f"{cell.date.strftime('%d/%m')}: {cell.capacity:g}"

    def generate(self) -> Dict[str, Path]:
        """Gera o relatório da sprint em Markdown, HTML, PDF e Excel"""
        markdown_content = self._generate_markdown()
        markdown_path = self.output_dir / f"{self.base_name}.md"
        markdown_path.write_text(markdown_content, encoding="utf-8")
        logger.info(f"Relatório Markdown gerado em {markdown_path}")

        html_path = self.output_dir / f"{self.base_name}.html"
        html_path.write_text(markdown.markdown(markdown_content, extensions=["tables"]), encoding="utf-8")
        logger.info(f"Relatório HTML gerado em {html_path}")

        pdf_path = self._generate_pdf()
        excel_path = self._generate_excel()

        return {"markdown": markdown_path, "html": html_path, "pdf": pdf_path, "excel": excel_path}

    def _generate_pdf(self) -> Path:
        """Gera o relatório da sprint em PDF"""
        pdf_path = self.output_dir / f"{self.base_name}.pdf"
        doc = SimpleDocTemplate(
            str(pdf_path),
            pagesize=A4,
            rightMargin=2*cm,
            leftMargin=2*cm,
            topMargin=2*cm,
            bottomMargin=2*cm
        )
        available_width = doc.width

        elements = []
        elements.append(Paragraph(
            f"Relatório de Capacidade: Sprint {_fmt(self.sprint.start_date)} - {self.team_name}",
            self.styles["CustomTitle"],
        ))
        elements.append(Spacer(1, 12))

        # 1. Resumo da Sprint
        elements.append(Paragraph("1. Resumo da Sprint", self.styles["CustomHeading1"]))
        summary_data = [[
            Paragraph("Métrica", self.styles["TableHeader"]),
            Paragraph("Valor", self.styles["TableHeader"]),
        ]]
        for label, value in self._summary_rows():
            summary_data.append([
                Paragraph(label, self.styles["TableCell"]),
                Paragraph(value, self.styles["TableCell"]),
            ])
        summary_table = LongTable(summary_data, colWidths=[available_width * 0.4, available_width * 0.6])
        summary_table.setStyle(self._create_table_style())
        elements.append(KeepTogether(summary_table))
        elements.append(Spacer(1, 12))

        # 2. Capacidade dos Recursos
        elements.append(Paragraph("2. Capacidade dos Recursos", self.styles["CustomHeading1"]))
        resource_data = [[
            Paragraph("Recurso", self.styles["TableHeader"]),
            Paragraph("Capacidade/dia", self.styles["TableHeader"]),
            Paragraph("Dias de presença", self.styles["TableHeader"]),
        ]]
        for row in self._resource_rows():
            resource_data.append([Paragraph(value, self.styles["TableCell"]) for value in row])
        resource_table = LongTable(
            resource_data,
            colWidths=[available_width * 0.5, available_width * 0.25, available_width * 0.25],
        )
        resource_table.setStyle(self._create_table_style())
        elements.append(KeepTogether(resource_table))
        elements.append(Spacer(1, 12))

        doc.build(elements)
        logger.info(f"Relatório PDF gerado em {pdf_path}")
        return pdf_path

    def _generate_excel(self) -> Path:
        """Gera o calendário de capacidade em Excel, uma grade semanal por recurso"""
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = f"Sprint {self.sprint.start_date.isoformat()}"

        medium = Side(style="medium")
        thin = Side(style="thin")

        last_col = len(WEEKDAY_LABELS)
        for col in range(1, last_col + 1):
            ws.column_dimensions[get_column_letter(col)].width = 12

        current_row = 1
        for resource in sorted(self.sprint.resources, key=lambda r: r.name):
            block_start = current_row

            # Nome do recurso (mesclado na largura da semana)
            ws.merge_cells(f"A{current_row}:{get_column_letter(last_col)}{current_row}")
            ws.cell(row=current_row, column=1, value=f"{resource.name} ({presence_days(resource):.1f} dias)")
            ws.cell(row=current_row, column=1).font = Font(bold=True)
            ws.cell(row=current_row, column=1).alignment = Alignment(horizontal="center")
            current_row += 1

            for col, label in enumerate(WEEKDAY_LABELS, start=1):
                cell = ws.cell(row=current_row, column=col, value=label)
                cell.font = Font(bold=True)
                cell.alignment = Alignment(horizontal="center")
            current_row += 1

            # Cada semana ocupa duas linhas: datas e capacidades
            for week in group_by_week(resource.daily_capacities):
                for col, week_cell in enumerate(week, start=1):
                    date_cell = ws.cell(row=current_row, column=col, value=week_cell.date)
                    date_cell.number_format = "dd/mm/yyyy"
                    date_cell.alignment = Alignment(horizontal="center")

                    capacity_cell = ws.cell(row=current_row + 1, column=col)
                    if week_cell.in_sprint_range:
                        capacity_cell.value = week_cell.capacity
                    capacity_cell.alignment = Alignment(horizontal="center")
                    self._apply_capacity_color(capacity_cell, week_cell, resource.capacity_per_day)
                current_row += 2

            for row in range(block_start, current_row):
                for col in range(1, last_col + 1):
                    ws.cell(row=row, column=col).border = Border(
                        left=medium if col == 1 else thin,
                        right=medium if col == last_col else thin,
                        top=medium if row == block_start else thin,
                        bottom=medium if row == current_row - 1 else thin,
                    )

            # Espaçamento entre recursos
            current_row += 2

        legend_row = current_row + 1
        legend_items = [
            ("Fim de Semana", self.excel_colors["weekend"]),
            ("Fora da Sprint", self.excel_colors["outside"]),
            ("Capacidade Nominal", self.excel_colors["full"]),
            ("Capacidade Parcial", self.excel_colors["partial"]),
            ("Sem Capacidade", self.excel_colors["empty"]),
        ]
        ws.merge_cells(f"A{legend_row}:D{legend_row}")
        ws.cell(row=legend_row, column=1, value="Legenda:")
        ws.cell(row=legend_row, column=1).font = Font(bold=True)
        for i, (label, color) in enumerate(legend_items):
            row = legend_row + i + 1
            ws.merge_cells(f"A{row}:C{row}")
            ws.cell(row=row, column=1, value=label)
            ws.cell(row=row, column=4).fill = color

        excel_path = self.output_dir / f"{self.base_name}.xlsx"
        wb.save(str(excel_path))
        logger.info(f"Relatório Excel gerado em {excel_path}")
        return excel_path

    def _apply_capacity_color(self, cell, week_cell: WeekCell, nominal: float) -> None:
        """
        Aplica a cor apropriada à célula de capacidade

        Args:
            cell: Célula do Excel
            week_cell: Célula do calendário semanal
            nominal: Capacidade nominal do recurso
        """
        if not week_cell.in_sprint_range:
            cell.fill = self.excel_colors["outside"]
        elif week_cell.is_weekend:
            cell.fill = self.excel_colors["weekend"]
        elif week_cell.capacity >= nominal and week_cell.capacity > 0:
            cell.fill = self.excel_colors["full"]
        elif week_cell.capacity > 0:
            cell.fill = self.excel_colors["partial"]
        else:
            cell.fill = self.excel_colors["empty"]
