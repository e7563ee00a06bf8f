"""Grid view showing the agent, the goal and the learned Q-values."""

from typing import Dict, Tuple
from PySide6.QtWidgets import QGraphicsView, QGraphicsScene
from PySide6.QtGui import QPainter
from PySide6.QtCore import Qt

from ..app.controller import TrainingController
from .tiles import GridTile


class GridView(QGraphicsView):
    """Graphics view for the grid world."""

    def __init__(self, controller: TrainingController):
        super().__init__()

        self.controller = controller
        self.scene = QGraphicsScene()
        self.setScene(self.scene)

        self.tiles: Dict[Tuple[int, int], GridTile] = {}
        self.tile_size = 60.0
        self.show_q_values = False
        self._grid_size = 0

        self.setRenderHint(QPainter.Antialiasing)

        self.controller.grid_updated.connect(self.update_grid)
        self.controller.agent_moved.connect(self._on_agent_moved)

        self.update_grid()

    def update_grid(self):
        """Rebuild tiles if the grid size changed, then repaint every tile."""
        grid_size = self.controller.grid_size
        if grid_size != self._grid_size:
            self.scene.clear()
            self.tiles.clear()
            self.scene.setSceneRect(0, 0, grid_size * self.tile_size, grid_size * self.tile_size)
            for y in range(grid_size):
                for x in range(grid_size):
                    tile = GridTile(x, y, self.tile_size)
                    tile.set_show_q_values(self.show_q_values)
                    self.scene.addItem(tile)
                    self.tiles[(x, y)] = tile
            self._grid_size = grid_size

        for coord in self.tiles:
            self._refresh_tile(coord)

    def _refresh_tile(self, coord: Tuple[int, int]):
        if coord == self.controller.agent_coord:
            kind = "agent"
        elif coord == self.controller.goal_coord:
            kind = "goal"
        elif coord == self.controller.start_coord:
            kind = "start"
        else:
            kind = "empty"
        table = self.controller.table
        q_values = table.q_values(coord) if coord in table else None
        self.tiles[coord].set_state(kind, q_values)

    def _on_agent_moved(self, x: int, y: int):
        # Only the previous and the new agent cells change
        for coord, tile in self.tiles.items():
            if tile.kind == "agent" or coord == (x, y):
                self._refresh_tile(coord)

    def set_show_q_values(self, show: bool):
        self.show_q_values = show
        for tile in self.tiles.values():
            tile.set_show_q_values(show)
        self.update_grid()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.fit_in_view()

    def fit_in_view(self):
        """Fit the entire grid in the view."""
        if self.scene.items():
            self.fitInView(self.scene.sceneRect(), Qt.KeepAspectRatio)
