"""
CSV export of a stored grid.

Two layouts:
  list   one row per cell and profile, every MaterialCalculation field
  matrix heights down, widths across, total cost in each cell

Numbers are written with repr() so nothing is lost between the database
and the spreadsheet.
"""

import csv
import io

LIST_HEADER = [
    "height_cm", "width_cm", "total_cost",
    "profile", "required_length_m", "length_with_scrap_m", "full_bars",
    "leftover_m", "is_reusable", "used_length_m", "cost",
]

LAYOUTS = ("list", "matrix")


def _num(value) -> str:
    if value is None:
        return ""
    return repr(value)


def cells_to_csv_list(cells: list) -> str:
    """
    cells: GridCell dicts ({"height", "width", "total_cost", "materials"}).
    A cell without materials still gets one row with its total.
    """
    out = io.StringIO()
    writer = csv.writer(out)
    writer.writerow(LIST_HEADER)
    for cell in cells:
        materials = cell.get("materials") or [None]
        for m in materials:
            row = [_num(cell["height"]), _num(cell["width"]), _num(cell["total_cost"])]
            if m is None:
                row += [""] * 8
            else:
                row += [
                    m["profile_name"],
                    _num(m["required_length"]),
                    _num(m["length_with_scrap"]),
                    m["full_bars"],
                    _num(m["leftover"]),
                    "yes" if m["is_reusable"] else "no",
                    _num(m["used_length"]),
                    _num(m["cost"]),
                ]
            writer.writerow(row)
    return out.getvalue()


def cells_to_csv_matrix(cells: list) -> str:
    """Heights as rows, widths as columns. Missing combinations are left blank."""
    heights = sorted({c["height"] for c in cells})
    widths = sorted({c["width"] for c in cells})
    totals = {(c["height"], c["width"]): c["total_cost"] for c in cells}

    out = io.StringIO()
    writer = csv.writer(out)
    writer.writerow(["height_cm \\ width_cm"] + [_num(w) for w in widths])
    for h in heights:
        writer.writerow([_num(h)] + [_num(totals.get((h, w))) for w in widths])
    return out.getvalue()


def export_cells(cells: list, layout: str = "list") -> str:
    if layout == "matrix":
        return cells_to_csv_matrix(cells)
    if layout == "list":
        return cells_to_csv_list(cells)
    raise ValueError(f"Unknown export layout: {layout}. Available: {list(LAYOUTS)}")
