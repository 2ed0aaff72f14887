import logging
import tkinter as tk
import tkinter.font as tkfont
from pathlib import Path
from tkinter import filedialog, messagebox, simpledialog
from typing import Dict, Optional, Set, Tuple

from .board import Board
from .config import AUTOSAVE_INTERVAL_MS, TASK_H, TASK_W
from .drag import DragController
from .dropzone import DropAction
from .errors import BoardImportError
from .persistence import AutosaveSink, export_json, read_json

logger = logging.getLogger(__name__)

# --------- Configuration ---------
FONT = ("Segoe UI", 10)
HEADER_FONT = ("Segoe UI", 10, "bold")
BG = "#f5f5f5"
SEL_OUTLINE = "#0ea5e9"
EDGE_COLOR = "#1976D2"
PREVIEW_CHILD = "#1976D2"
PREVIEW_CATEGORY = "#2196F3"
PREVIEW_GROUP = "#FF9800"
CATEGORY_FILL = "#ececec"
ZOOM_STEP = 1.1
ZOOM_MIN = 0.4
ZOOM_MAX = 2.5
DEFAULT_STATUS = (
    "Double-click the canvas to add a task. Drag a task under another to nest it, "
    "just above another to group them. Ctrl+Z / Ctrl+Y undo and redo."
)


def _tk_color(value: object, fallback: str) -> str:
    if isinstance(value, str) and value.startswith("#"):
        return value
    return fallback


class BoardApp:
    def __init__(self, root: tk.Tk, sink: Optional[AutosaveSink] = None) -> None:
        self.root = root
        root.title("Mind Board")

        self.board = Board()
        self.drag = DragController(self.board)
        self.sink = sink or AutosaveSink()
        self.path: Optional[str] = None
        self.scale = 1.0
        self.offset_x = 0.0
        self.offset_y = 0.0
        self.selected_ids: Set[str] = set()
        self.item_to_entity: Dict[int, Tuple[str, str]] = {}
        self.panning: Optional[Dict[str, float]] = None

        self._build_ui()
        self._font = tkfont.Font(root, font=FONT)
        self._offer_restore()
        self.redraw()
        self.root.after(AUTOSAVE_INTERVAL_MS, self._autosave_tick)

    # ---------- UI ----------
    def _build_ui(self) -> None:
        menubar = tk.Menu(self.root)

        file_menu = tk.Menu(menubar, tearoff=False)
        file_menu.add_command(label="Import JSON", command=self.import_board)
        file_menu.add_command(label="Export JSON", command=self.export_board)
        file_menu.add_separator()
        file_menu.add_command(label="Clear Canvas", command=self.clear_board)
        menubar.add_cascade(label="File", menu=file_menu)

        edit_menu = tk.Menu(menubar, tearoff=False)
        edit_menu.add_command(label="Undo", command=self.undo, accelerator="Ctrl+Z")
        edit_menu.add_command(label="Redo", command=self.redo, accelerator="Ctrl+Y")
        edit_menu.add_separator()
        edit_menu.add_command(label="Delete Task", command=self.delete_selected, accelerator="Del")
        menubar.add_cascade(label="Edit", menu=edit_menu)
        self.root.config(menu=menubar)

        self.root.bind("<Control-z>", lambda _: self.undo())
        self.root.bind("<Control-y>", lambda _: self.redo())
        self.root.bind("<Control-Shift-Z>", lambda _: self.redo())
        self.root.bind("<Delete>", lambda _: self.delete_selected())
        self.root.bind("<Escape>", lambda _: self.cancel_drag())
        self.root.bind("<Control-0>", lambda _: self.reset_view())

        self.canvas = tk.Canvas(self.root, bg=BG, highlightthickness=0)
        self.canvas.pack(fill=tk.BOTH, expand=True)
        self.canvas.bind("<Button-1>", self.on_press)
        self.canvas.bind("<Control-Button-1>", lambda e: self.on_press(e, additive=True))
        self.canvas.bind("<B1-Motion>", self.on_drag)
        self.canvas.bind("<ButtonRelease-1>", self.on_release)
        self.canvas.bind("<Double-Button-1>", self.on_double_click)
        self.canvas.bind("<Button-3>", self.on_context)
        self.canvas.bind("<Control-MouseWheel>", self._on_ctrl_wheel)

        self.status_var = tk.StringVar(value=DEFAULT_STATUS)
        tk.Label(self.root, textvariable=self.status_var, anchor="w", bg="white").pack(fill=tk.X, side=tk.BOTTOM)

    def _set_status(self, message: str) -> None:
        self.status_var.set(message)

    # ---------- Coordinate helpers ----------
    def _to_canvas_point(self, x: float, y: float) -> Tuple[float, float]:
        return self.offset_x + x * self.scale, self.offset_y + y * self.scale

    def _from_canvas_point(self, x: float, y: float) -> Tuple[float, float]:
        if self.scale == 0:
            return x, y
        return (x - self.offset_x) / self.scale, (y - self.offset_y) / self.scale

    def _entity_at(self, x: float, y: float) -> Optional[Tuple[str, str]]:
        hits = self.canvas.find_overlapping(x, y, x, y)
        for item in reversed(hits):
            entity = self.item_to_entity.get(item)
            if entity is not None:
                return entity
        return None

    # ---------- Drawing ----------
    def redraw(self) -> None:
        self.canvas.delete("all")
        self.item_to_entity.clear()
        for category in self.board.categories.values():
            self._draw_category(category.id)
        for task in self.board.tasks.values():
            parent = self.board.task(task.parent_id)
            if parent is not None:
                self._draw_edge(parent.id, task.id)
        for tid in self.board.tasks:
            self._draw_task(tid)
        self._draw_preview()

    def _rect(self, x: float, y: float, w: float, h: float) -> Tuple[float, float, float, float]:
        x0, y0 = self._to_canvas_point(x, y)
        x1, y1 = self._to_canvas_point(x + w, y + h)
        return x0, y0, x1, y1

    def _draw_category(self, cid: str) -> None:
        category = self.board.categories[cid]
        style = category.style
        box = self._rect(category.position.x, category.position.y, category.size.width, category.size.height)
        shape = self.canvas.create_rectangle(
            *box,
            fill=_tk_color(style.get("bgColor"), CATEGORY_FILL),
            outline=_tk_color(style.get("borderColor"), "#999999"),
            width=int(style.get("borderWidth", 2)),
            dash=(6, 4),
        )
        header = self.canvas.create_text(
            box[0] + 12, box[1] + 8, text=category.name, anchor="nw", font=HEADER_FONT, fill="#555555"
        )
        self.item_to_entity[shape] = ("category", cid)
        self.item_to_entity[header] = ("category-header", cid)

    def _draw_edge(self, pid: str, cid: str) -> None:
        parent = self.board.tasks[pid]
        child = self.board.tasks[cid]
        sx = parent.position.x + parent.size.width * 0.15
        sy = parent.position.y + parent.size.height
        ey = child.position.y + child.size.height / 2
        points = [self._to_canvas_point(sx, sy), self._to_canvas_point(sx, ey), self._to_canvas_point(child.position.x, ey)]
        self.canvas.create_line(*[c for p in points for c in p], fill=EDGE_COLOR, width=2)

    def _draw_task(self, tid: str) -> None:
        task = self.board.tasks[tid]
        style = task.style
        box = self._rect(task.position.x, task.position.y, task.size.width, task.size.height)
        selected = tid in self.selected_ids
        shape = self.canvas.create_rectangle(
            *box,
            fill=_tk_color(style.get("bgColor"), "#ffffff"),
            outline=SEL_OUTLINE if selected else _tk_color(style.get("borderColor"), "#d4d4d8"),
            width=3 if selected else 2,
        )
        text = self.canvas.create_text(
            (box[0] + box[2]) / 2,
            (box[1] + box[3]) / 2,
            text=task.content,
            width=max(box[2] - box[0] - 12, 10),
            font=self._font,
            fill=_tk_color(style.get("textColor"), "#222222"),
        )
        self.item_to_entity[shape] = ("task", tid)
        self.item_to_entity[text] = ("task", tid)

    def _draw_preview(self) -> None:
        zone = self.drag.preview
        if not self.drag.active or zone.is_move:
            return
        if zone.action is DropAction.ADD_CHILD:
            target = self.board.task(zone.target_id)
            if target is None:
                return
            box = self._rect(
                target.position.x - target.size.width * 0.2,
                target.position.y + target.size.height,
                target.size.width * 1.4,
                50,
            )
            self.canvas.create_rectangle(*box, outline=PREVIEW_CHILD, width=2, dash=(5, 5))
        elif zone.action is DropAction.CREATE_CATEGORY:
            target = self.board.task(zone.target_id)
            if target is None:
                return
            box = self._rect(target.position.x - 40, target.position.y - 70, target.size.width + 80, target.size.height + 110)
            self.canvas.create_rectangle(*box, outline=PREVIEW_CATEGORY, width=3, dash=(10, 5))
        elif zone.action is DropAction.ADD_TO_CATEGORY:
            category = self.board.category(zone.target_id)
            if category is None:
                return
            box = self._rect(category.position.x, category.position.y, category.size.width, category.size.height)
            self.canvas.create_rectangle(*box, outline=PREVIEW_GROUP, width=4, dash=(15, 5))

    # ---------- Selection ----------
    def _select(self, tid: Optional[str], additive: bool = False) -> None:
        if tid is None:
            self.selected_ids = set()
        elif additive:
            self.selected_ids ^= {tid}
        elif tid not in self.selected_ids:
            self.selected_ids = {tid}

    # ---------- Event handlers ----------
    def on_press(self, event: tk.Event, additive: bool = False) -> None:
        entity = self._entity_at(event.x, event.y)
        point = self._from_canvas_point(event.x, event.y)
        if entity is None:
            self._select(None)
            self.panning = {"x": event.x, "y": event.y, "ox": self.offset_x, "oy": self.offset_y}
            self.redraw()
            return
        kind, eid = entity
        if kind == "task":
            self._select(eid, additive=additive)
            selection = self.selected_ids if len(self.selected_ids) > 1 else ()
            self.drag.begin_task(eid, point, selection=selection)
        else:
            self.drag.begin_category(eid, point)
        self.redraw()

    def on_drag(self, event: tk.Event) -> None:
        if self.panning is not None:
            self.offset_x = self.panning["ox"] + (event.x - self.panning["x"])
            self.offset_y = self.panning["oy"] + (event.y - self.panning["y"])
            self.canvas.config(cursor="fleur")
            self.redraw()
            return
        if self.drag.active:
            self.drag.move(self._from_canvas_point(event.x, event.y))
            self.redraw()

    def on_release(self, event: tk.Event) -> None:
        if self.panning is not None:
            self.panning = None
            self.canvas.config(cursor="")
            return
        if not self.drag.active:
            return
        result = self.drag.end(self._from_canvas_point(event.x, event.y))
        if result.detached_from:
            self._set_status(f"Task detached from its {result.detached_from}.")
        elif not result.zone.is_move:
            self._set_status(f"{result.zone.action.value.replace('_', ' ').capitalize()} applied.")
        self.redraw()

    def cancel_drag(self) -> None:
        if self.drag.active:
            self.drag.cancel()
            self._set_status("Drag cancelled.")
            self.redraw()

    def on_double_click(self, event: tk.Event) -> Optional[str]:
        entity = self._entity_at(event.x, event.y)
        if entity is None:
            lx, ly = self._from_canvas_point(event.x, event.y)
            tid = self.board.create_task((lx - TASK_W / 2, ly - TASK_H / 2))
            self._select(tid)
            self._set_status("Task created.")
        elif entity[0] == "task":
            self.edit_task(entity[1])
        elif entity[0] == "category-header":
            self.rename_category(entity[1])
        self.redraw()
        return "break"

    def on_context(self, event: tk.Event) -> None:
        entity = self._entity_at(event.x, event.y)
        if entity is None:
            return
        kind, eid = entity
        if kind == "task":
            count = len(self.board.store.descendants(eid))
            if count and not messagebox.askyesno("Delete", f"Delete this task and its {count} descendant(s)?"):
                return
            self.board.delete_task(eid)
            self.selected_ids.discard(eid)
            self._set_status("Task deleted.")
        else:
            self.board.delete_category(eid)
            self._set_status("Category removed; its tasks were kept.")
        self.redraw()

    def _on_ctrl_wheel(self, event: tk.Event) -> None:
        factor = ZOOM_STEP if event.delta > 0 else 1 / ZOOM_STEP
        new_scale = max(ZOOM_MIN, min(ZOOM_MAX, self.scale * factor))
        ratio = new_scale / self.scale if self.scale else 1.0
        self.offset_x = event.x - ratio * (event.x - self.offset_x)
        self.offset_y = event.y - ratio * (event.y - self.offset_y)
        self.scale = new_scale
        self.redraw()
        self._set_status(f"Zoom {int(self.scale * 100)}%")

    def reset_view(self) -> None:
        self.scale = 1.0
        self.offset_x = 0.0
        self.offset_y = 0.0
        self.redraw()
        self._set_status("View reset.")

    # ---------- Commands ----------
    def undo(self) -> None:
        if self.board.undo():
            self._set_status("Undone.")
        self.redraw()

    def redo(self) -> None:
        if self.board.redo():
            self._set_status("Redone.")
        self.redraw()

    def delete_selected(self) -> None:
        if not self.selected_ids:
            self._set_status("Nothing selected to delete.")
            return
        for tid in list(self.selected_ids):
            self.board.delete_task(tid)
        self.selected_ids = set()
        self._set_status("Task deleted.")
        self.redraw()

    def edit_task(self, tid: str) -> None:
        session = self.board.begin_edit(tid)
        if session is None:
            return

        editor = tk.Toplevel(self.root)
        editor.title("Edit Task")
        editor.transient(self.root)
        editor.grab_set()
        toolbar = tk.Frame(editor)
        toolbar.pack(fill=tk.X, padx=8, pady=(8, 4))

        text_widget = tk.Text(editor, wrap="word", font=FONT)
        text_widget.insert("1.0", session.original)
        text_widget.pack(fill=tk.BOTH, expand=True, padx=8, pady=(0, 8))

        def current_text() -> str:
            return text_widget.get("1.0", "end").rstrip("\n")

        def save() -> None:
            session.preview(current_text())
            self.redraw()

        def confirm() -> None:
            session.confirm(current_text())
            self._set_status("Task text updated.")
            editor.destroy()

        def cancel() -> None:
            session.cancel()
            editor.destroy()

        tk.Button(toolbar, text="Confirm", command=confirm).pack(side=tk.RIGHT, padx=2)
        tk.Button(toolbar, text="Save", command=save).pack(side=tk.RIGHT, padx=2)
        tk.Button(toolbar, text="Cancel", command=cancel).pack(side=tk.RIGHT, padx=2)

        editor.geometry("420x200")
        editor.minsize(420, 200)
        editor.protocol("WM_DELETE_WINDOW", cancel)
        editor.bind("<Escape>", lambda _e: cancel())
        editor.wait_window()
        self.redraw()

    def rename_category(self, cid: str) -> None:
        category = self.board.category(cid)
        if category is None:
            return
        name = simpledialog.askstring("Rename Category", "Name:", initialvalue=category.name, parent=self.root)
        if name is not None:
            self.board.update_category_name(cid, name)

    # ---------- Save / Load ----------
    def export_board(self) -> None:
        initialfile = Path(self.path).name if self.path else "mind-board.json"
        path = filedialog.asksaveasfilename(
            defaultextension=".json",
            filetypes=[("JSON", "*.json")],
            title="Export Board",
            initialfile=initialfile,
        )
        if not path:
            return
        try:
            export_json(self.board.to_dict(), path)
        except OSError as exc:
            messagebox.showerror("Export failed", str(exc))
            return
        self.path = path
        self._set_status(f"Exported to {path}.")

    def import_board(self) -> None:
        path = filedialog.askopenfilename(
            defaultextension=".json",
            filetypes=[("JSON", "*.json")],
            title="Import Board",
        )
        if not path:
            return
        try:
            self.board.load(read_json(path))
        except BoardImportError as exc:
            messagebox.showerror("Import failed", str(exc))
            return
        self.path = path
        self.selected_ids = set()
        self.redraw()
        self._set_status(f"Imported {path}.")

    def clear_board(self) -> None:
        if not messagebox.askyesno("Clear", "Clear the whole canvas? This cannot be undone."):
            return
        self.board.clear()
        self.sink.clear()
        self.selected_ids = set()
        self.redraw()
        self._set_status("Canvas cleared.")

    def _offer_restore(self) -> None:
        saved = self.sink.load()
        if not isinstance(saved, dict) or not saved.get("tasks"):
            return
        if not messagebox.askyesno("Restore", "An unsaved draft was found. Restore it?"):
            return
        try:
            self.board.load(saved)
        except BoardImportError as exc:
            logger.warning("Autosave could not be restored: %s", exc)
            self._set_status("Draft could not be restored.")
            return
        self._set_status("Draft restored.")

    def _autosave_tick(self) -> None:
        if not self.sink.save(self.board.to_dict()):
            self._set_status("Autosave failed; keep working and export manually.")
        self.root.after(AUTOSAVE_INTERVAL_MS, self._autosave_tick)


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    root = tk.Tk()
    BoardApp(root)
    root.minsize(900, 600)
    root.mainloop()


if __name__ == "__main__":
    main()
