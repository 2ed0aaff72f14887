import os
from pathlib import Path
from typing import Dict, Union

# --------- Task geometry ---------
TASK_W = 240
TASK_H = 50
TASK_PLACEHOLDER = "New Task"
CATEGORY_PLACEHOLDER = "Category"

# --------- Layout ---------
CHILD_OFFSET_RATIO = 0.3
CHILD_TOP_GAP = 15
CHILD_STRIDE = 60

CATEGORY_PAD_X = 40
CATEGORY_PAD_TOP = 70
CATEGORY_PAD_BOTTOM = 40

# --------- Drop zones ---------
CHILD_ZONE_DEPTH = 80
CHILD_ZONE_LEFT = 0.2
CHILD_ZONE_RIGHT = 1.2
CATEGORY_ZONE_MIN = 20
CATEGORY_ZONE_MAX = 80
DRAG_THRESHOLD = 30
PARENT_EXIT_TOLERANCE = 50

# --------- History ---------
HISTORY_LIMIT = 50

# --------- Persistence ---------
AUTOSAVE_KEY = "idea-canvas-autosave"
AUTOSAVE_INTERVAL_MS = 5000
AUTOSAVE_MAX_AGE_HOURS = 24
DEFAULT_HOME = Path(os.environ.get("MINDBOARD_HOME", Path.home() / ".mindboard"))

# --------- Styles ---------
Style = Dict[str, Union[str, int]]

FREE_STYLE: Style = {
    "bgColor": "#FFF0F5",
    "textColor": "#C2185B",
    "borderColor": "#F8BBD9",
}
PARENT_STYLE: Style = {
    "bgColor": "#E3F2FD",
    "textColor": "#1976D2",
    "borderColor": "#1976D2",
}
CHILD_STYLE: Style = {
    "bgColor": "#F1F8E9",
    "textColor": "#33691E",
    "borderColor": "#AED581",
}
TASK_STYLES: Dict[str, Style] = {
    "free": FREE_STYLE,
    "parent": PARENT_STYLE,
    "child": CHILD_STYLE,
}
CATEGORY_STYLE: Style = {
    "borderColor": "#999",
    "bgColor": "rgba(200, 200, 200, 0.15)",
    "borderWidth": 2,
}
