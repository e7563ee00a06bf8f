"""Grid tiles for the Q-learning grid world view."""

from typing import Dict, Literal, Optional
from PySide6.QtWidgets import QGraphicsRectItem, QGraphicsTextItem
from PySide6.QtGui import QBrush, QPen, QColor, QFont

from ..domain.types import ACTIONS, QValues

TileKind = Literal["empty", "start", "goal", "agent"]


class GridTile(QGraphicsRectItem):
    """Graphics item representing a single grid cell."""

    def __init__(self, x: int, y: int, size: float):
        super().__init__(0, 0, size, size)
        self.grid_x = x
        self.grid_y = y
        self.size = size
        self.kind: TileKind = "empty"
        self.q_values: Optional[QValues] = None
        self.show_q_values = False

        self.setPos(x * size, y * size)

        self._q_value_texts: Dict[str, QGraphicsTextItem] = {}
        self._setup_text_items()
        self.update_appearance()

    def _setup_text_items(self):
        """Setup one text item per action, placed toward its direction."""
        small_font = QFont("Arial", max(6, int(self.size * 0.12)))
        positions = {
            "up": (self.size * 0.38, self.size * 0.02),
            "down": (self.size * 0.38, self.size * 0.72),
            "left": (self.size * 0.02, self.size * 0.38),
            "right": (self.size * 0.62, self.size * 0.38),
        }

        for action in ACTIONS:
            text_item = QGraphicsTextItem(parent=self)
            text_item.setFont(small_font)
            text_item.setPos(*positions[action])
            self._q_value_texts[action] = text_item

    def set_state(self, kind: TileKind, q_values: Optional[QValues] = None):
        self.kind = kind
        self.q_values = q_values
        self.update_appearance()

    def set_show_q_values(self, show: bool):
        self.show_q_values = show
        self.update_appearance()

    def update_appearance(self):
        """Update tile colors and Q-value labels."""
        brush_color, pen_color = self._get_state_colors()
        self.setBrush(QBrush(brush_color))
        self.setPen(QPen(pen_color, 1))
        self._update_q_value_display()

    def _get_state_colors(self) -> tuple[QColor, QColor]:
        color_map = {
            "empty": (QColor(240, 240, 240), QColor(180, 180, 180)),
            "start": (QColor(200, 220, 255), QColor(120, 150, 200)),
            "goal": (QColor(255, 153, 0), QColor(200, 110, 0)),
            "agent": (QColor(0, 200, 0), QColor(0, 140, 0)),
        }

        if self.kind == "empty" and self.show_q_values and self.q_values is not None:
            max_q = self.q_values.max_value()
            intensity = min(abs(max_q) / 10.0, 1.0)
            if max_q > 0:
                return (QColor(200, 255, 200, int(255 * intensity)), QColor(100, 200, 100))
            if max_q < 0:
                return (QColor(255, 200, 200, int(255 * intensity)), QColor(200, 100, 100))

        return color_map[self.kind]

    def _update_q_value_display(self):
        if not self.show_q_values or self.q_values is None:
            for text_item in self._q_value_texts.values():
                text_item.setVisible(False)
            return

        for action, value in self.q_values.as_dict().items():
            text_item = self._q_value_texts[action]
            if abs(value) > 0.01:  # Only show significant values
                text_item.setPlainText(f"{value:.1f}")
                text_item.setDefaultTextColor(QColor(0, 150, 0) if value > 0 else QColor(150, 0, 0))
                text_item.setVisible(True)
            else:
                text_item.setVisible(False)
