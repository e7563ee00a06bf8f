"""Line chart of total reward per episode."""

from typing import List
from PySide6.QtWidgets import QWidget
from PySide6.QtGui import QPainter, QPen, QColor, QPolygonF
from PySide6.QtCore import Qt, QPointF, QRectF


class RewardChart(QWidget):
    """Plots the total reward of every finished episode."""

    MARGIN = 40

    def __init__(self, parent=None):
        super().__init__(parent)
        self.rewards: List[float] = []
        self.setMinimumSize(320, 220)

    def add_reward(self, reward: float):
        self.rewards.append(reward)
        self.update()

    def clear(self):
        self.rewards.clear()
        self.update()

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)
        painter.fillRect(self.rect(), QColor(255, 255, 255))

        plot = QRectF(self.MARGIN, 10, self.width() - self.MARGIN - 10,
                      self.height() - self.MARGIN - 10)
        painter.setPen(QPen(QColor(120, 120, 120), 1))
        painter.drawRect(plot)
        painter.drawText(QRectF(plot.left(), plot.bottom() + 5, plot.width(), 20),
                         Qt.AlignCenter, "Episode")

        if not self.rewards:
            painter.drawText(plot, Qt.AlignCenter, "No episodes yet")
            painter.end()
            return

        low, high = min(self.rewards), max(self.rewards)
        if high == low:
            low, high = low - 1.0, high + 1.0
        painter.drawText(QRectF(0, plot.top() - 5, self.MARGIN - 4, 20),
                         Qt.AlignRight, f"{high:.1f}")
        painter.drawText(QRectF(0, plot.bottom() - 15, self.MARGIN - 4, 20),
                         Qt.AlignRight, f"{low:.1f}")

        count = len(self.rewards)
        x_step = plot.width() / max(count - 1, 1)
        points = QPolygonF()
        for i, reward in enumerate(self.rewards):
            x = plot.left() + i * x_step
            y = plot.bottom() - (reward - low) / (high - low) * plot.height()
            points.append(QPointF(x, y))

        painter.setPen(QPen(QColor(0, 0, 255), 2))
        painter.drawPolyline(points)
        painter.end()
