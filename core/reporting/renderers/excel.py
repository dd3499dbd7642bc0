from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from core.reporting.contexts import AuditExportContext
from core.services.audit.diff import compute_changed_fields, field_diffs, format_value


class AuditLogExcelRenderer:
    def render(self, ctx: AuditExportContext, output_path: Path) -> Path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb = Workbook()

        header_font = Font(bold=True)
        title_font = Font(bold=True, size=14)
        center = Alignment(horizontal="center")
        wrap = Alignment(wrap_text=True, vertical="top")
        thin_border = Border(
            left=Side(style="thin"),
            right=Side(style="thin"),
            top=Side(style="thin"),
            bottom=Side(style="thin"),
        )
        header_fill = PatternFill("solid", fgColor="DDDDDD")

        # ---------------- Summary ----------------
        ws = wb.active
        ws.title = "Summary"
        ws["A1"] = "Audit log export"
        ws["A1"].font = title_font

        row = 3

        def kv(key, value):
            nonlocal row
            ws[f"A{row}"] = key
            ws[f"B{row}"] = value
            ws[f"A{row}"].font = header_font
            ws[f"A{row}"].border = thin_border
            ws[f"B{row}"].border = thin_border
            row += 1

        q = ctx.query
        kv("Generated at", ctx.generated_at.isoformat(timespec="seconds"))
        kv("Generated by", ctx.generated_by or "system")
        kv("From date", q.from_date.isoformat() if q.from_date else "")
        kv("To date", q.to_date.isoformat() if q.to_date else "")
        kv("Action", q.action or "all")
        kv("Table", q.table_name or "all")
        kv("Actor email contains", q.actor_email or "")
        kv("Record id contains", q.record_id or "")
        kv("Matching entries", ctx.total_matching)
        kv("Exported entries", len(ctx.entries))
        if ctx.truncated:
            kv("Note", "Export truncated; narrow the filters to export everything.")

        ws.column_dimensions["A"].width = 24
        ws.column_dimensions["B"].width = 40

        # ---------------- Entries ----------------
        ws_entries = wb.create_sheet("Entries")
        headers = ["Timestamp", "Action", "Table", "Record ID", "Actor", "Actor ID", "Changed fields"]
        for col_index, h in enumerate(headers, start=1):
            cell = ws_entries.cell(row=1, column=col_index, value=h)
            cell.font = header_font
            cell.alignment = center
            cell.fill = header_fill
            cell.border = thin_border

        for row_index, e in enumerate(ctx.entries, start=2):
            values = [
                e.created_at.isoformat(timespec="seconds") if e.created_at else "",
                e.action.value,
                e.table_name,
                e.record_id or "",
                e.actor_email or "",
                e.actor_id or "",
                ", ".join(compute_changed_fields(e.old_data, e.new_data)),
            ]
            for col_index, value in enumerate(values, start=1):
                ws_entries.cell(row=row_index, column=col_index, value=value).border = thin_border

        for col, width in zip("ABCDEFG", (22, 10, 30, 38, 30, 38, 50)):
            ws_entries.column_dimensions[col].width = width
        ws_entries.freeze_panes = "A2"

        # ---------------- Changes ----------------
        ws_changes = wb.create_sheet("Changes")
        headers = ["Timestamp", "Table", "Record ID", "Field", "Kind", "Old value", "New value"]
        for col_index, h in enumerate(headers, start=1):
            cell = ws_changes.cell(row=1, column=col_index, value=h)
            cell.font = header_font
            cell.alignment = center
            cell.fill = header_fill
            cell.border = thin_border

        row_index = 2
        for e in ctx.entries:
            for diff in field_diffs(e.old_data, e.new_data):
                if not diff.changed:
                    continue
                values = [
                    e.created_at.isoformat(timespec="seconds") if e.created_at else "",
                    e.table_name,
                    e.record_id or "",
                    diff.key,
                    diff.kind,
                    format_value(diff.old_value),
                    format_value(diff.new_value),
                ]
                for col_index, value in enumerate(values, start=1):
                    cell = ws_changes.cell(row=row_index, column=col_index, value=value)
                    cell.border = thin_border
                    cell.alignment = wrap
                row_index += 1

        for col, width in zip("ABCDEFG", (22, 30, 38, 24, 10, 40, 40)):
            ws_changes.column_dimensions[col].width = width
        ws_changes.freeze_panes = "A2"

        wb.save(output_path)
        return output_path
