"""Main window for the grid world Q-learning demo."""

from PySide6.QtWidgets import (
    QMainWindow, QVBoxLayout, QHBoxLayout, QWidget, QPushButton, QLabel,
    QSlider, QSpinBox, QDoubleSpinBox, QButtonGroup, QRadioButton,
    QStatusBar, QGroupBox, QCheckBox, QMessageBox
)
from PySide6.QtCore import Qt
from PySide6.QtGui import QCloseEvent

from ..app.controller import TrainingController
from ..app.fsm import TrainingState
from ..domain.types import Episode, TrainingResult
from .grid_view import GridView
from .reward_chart import RewardChart


class MainWindow(QMainWindow):
    """Main application window."""

    def __init__(self, controller: TrainingController):
        super().__init__()
        self.controller = controller

        self.setWindowTitle("Grid World - Q-Learning Agent")
        self.setMinimumSize(1000, 640)

        self._create_ui()
        self._setup_connections()

        self._update_button_states()
        self._update_status_message()

    def _create_ui(self):
        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        main_layout = QVBoxLayout(central_widget)

        main_layout.addLayout(self._create_controls())

        content_layout = QHBoxLayout()
        self.grid_view = GridView(self.controller)
        content_layout.addWidget(self.grid_view, 1)
        content_layout.addWidget(self._create_statistics_panel(), 1)
        main_layout.addLayout(content_layout, 1)

        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)

    def _create_controls(self) -> QHBoxLayout:
        layout = QHBoxLayout()
        config = self.controller.config

        rl_group = QGroupBox("Q-Learning")
        rl_layout = QVBoxLayout(rl_group)

        mode_layout = QHBoxLayout()
        mode_layout.addWidget(QLabel("Training Mode:"))
        self.mode_button_group = QButtonGroup()
        self.visual_radio = QRadioButton("Visual")
        self.background_radio = QRadioButton("Background")
        self.visual_radio.setChecked(config.training_mode == "visual")
        self.background_radio.setChecked(config.training_mode == "background")
        self.mode_button_group.addButton(self.visual_radio)
        self.mode_button_group.addButton(self.background_radio)
        mode_layout.addWidget(self.visual_radio)
        mode_layout.addWidget(self.background_radio)
        mode_layout.addStretch()
        rl_layout.addLayout(mode_layout)

        speed_layout = QHBoxLayout()
        speed_layout.addWidget(QLabel("Step delay:"))
        self.speed_slider = QSlider(Qt.Horizontal)
        self.speed_slider.setRange(0, 1000)
        self.speed_slider.setValue(config.step_delay_ms)
        self.speed_slider.setEnabled(config.training_mode == "visual")
        speed_layout.addWidget(self.speed_slider)
        self.speed_label = QLabel(f"{config.step_delay_ms}ms")
        self.speed_label.setMinimumWidth(50)
        speed_layout.addWidget(self.speed_label)
        rl_layout.addLayout(speed_layout)

        buttons_layout = QHBoxLayout()
        self.train_btn = QPushButton("Train")
        self.pause_btn = QPushButton("Pause")
        self.stop_btn = QPushButton("Stop")
        self.reset_btn = QPushButton("Reset")
        for btn in [self.train_btn, self.pause_btn, self.stop_btn, self.reset_btn]:
            buttons_layout.addWidget(btn)
        rl_layout.addLayout(buttons_layout)
        layout.addWidget(rl_group)

        params_group = QGroupBox("Parameters")
        params_layout = QHBoxLayout(params_group)

        self.episodes_spin = QSpinBox()
        self.episodes_spin.setRange(1, 10000)
        self.episodes_spin.setValue(config.max_episodes)
        self.max_steps_spin = QSpinBox()
        self.max_steps_spin.setRange(1, 10000)
        self.max_steps_spin.setValue(config.max_steps_per_episode)
        self.alpha_spin = self._probability_spin(config.learning_rate, minimum=0.01)
        self.gamma_spin = self._probability_spin(config.discount_factor, minimum=0.01)
        self.epsilon_spin = self._probability_spin(config.epsilon, minimum=0.0)

        for label, widget in [("Episodes", self.episodes_spin), ("Max steps", self.max_steps_spin),
                              ("Alpha", self.alpha_spin), ("Gamma", self.gamma_spin),
                              ("Epsilon", self.epsilon_spin)]:
            column = QVBoxLayout()
            column.addWidget(QLabel(label))
            column.addWidget(widget)
            params_layout.addLayout(column)

        self.q_values_checkbox = QCheckBox("Show Q-values")
        params_layout.addWidget(self.q_values_checkbox)
        layout.addWidget(params_group)

        return layout

    @staticmethod
    def _probability_spin(value: float, minimum: float) -> QDoubleSpinBox:
        spin = QDoubleSpinBox()
        spin.setRange(minimum, 1.0)
        spin.setSingleStep(0.05)
        spin.setDecimals(2)
        spin.setValue(value)
        return spin

    def _create_statistics_panel(self) -> QWidget:
        panel = QGroupBox("Training")
        layout = QVBoxLayout(panel)

        self.reward_chart = RewardChart()
        layout.addWidget(self.reward_chart, 1)

        self.episode_label = QLabel("Episode: 0 / 0")
        self.last_reward_label = QLabel("Last reward: -")
        self.success_label = QLabel("Success rate: -")
        self.epsilon_label = QLabel(f"Epsilon: {self.controller.trainer.epsilon:.3f}")
        for label in [self.episode_label, self.last_reward_label,
                      self.success_label, self.epsilon_label]:
            layout.addWidget(label)

        return panel

    def _setup_connections(self):
        self.train_btn.clicked.connect(self._on_train_clicked)
        self.pause_btn.clicked.connect(self._on_pause_clicked)
        self.stop_btn.clicked.connect(self.controller.stop_training)
        self.reset_btn.clicked.connect(self._on_reset_clicked)
        self.speed_slider.valueChanged.connect(self._on_speed_changed)
        self.visual_radio.toggled.connect(self._on_mode_changed)
        self.q_values_checkbox.toggled.connect(self.grid_view.set_show_q_values)

        self.controller.state_changed.connect(self._on_state_changed)
        self.controller.episode_completed.connect(self._on_episode_completed)
        self.controller.training_progress.connect(self._on_training_progress)
        self.controller.training_completed.connect(self._on_training_completed)
        self.controller.error_occurred.connect(self._on_error)

    # Event handlers

    def _on_train_clicked(self):
        applied = self.controller.update_config(
            learning_rate=self.alpha_spin.value(),
            discount_factor=self.gamma_spin.value(),
            epsilon=self.epsilon_spin.value(),
            max_steps_per_episode=self.max_steps_spin.value(),
        )
        if not applied:
            return
        if self.controller.start_training(self.episodes_spin.value()):
            self.reward_chart.clear()

    def _on_pause_clicked(self):
        if self.controller.current_state == TrainingState.PAUSED:
            self.controller.resume_training()
        else:
            self.controller.pause_training()

    def _on_reset_clicked(self):
        self.controller.reset_algorithm()
        self.reward_chart.clear()
        self.episode_label.setText("Episode: 0 / 0")
        self.last_reward_label.setText("Last reward: -")
        self.success_label.setText("Success rate: -")
        self.epsilon_label.setText(f"Epsilon: {self.controller.trainer.epsilon:.3f}")

    def _on_speed_changed(self, value: int):
        self.speed_label.setText(f"{value}ms")
        self.controller.update_config(step_delay_ms=value)

    def _on_mode_changed(self, visual: bool):
        self.controller.update_config(training_mode="visual" if visual else "background")
        self.speed_slider.setEnabled(visual)

    def _on_state_changed(self, state: TrainingState):
        self._update_button_states()
        self._update_status_message()

    def _on_episode_completed(self, episode: Episode):
        self.reward_chart.add_reward(episode.total_reward)
        self.last_reward_label.setText(
            f"Last reward: {episode.total_reward:.2f} ({episode.steps} steps)"
        )
        self.epsilon_label.setText(f"Epsilon: {self.controller.trainer.epsilon:.3f}")

    def _on_training_progress(self, current: int, total: int):
        self.episode_label.setText(f"Episode: {current} / {total}")

    def _on_training_completed(self, result: TrainingResult):
        self.success_label.setText(f"Success rate: {result.success_rate:.1%}")
        path = self.controller.trainer.greedy_path()
        outcome = f"greedy path reaches goal in {path.steps_taken} steps" if path.success \
            else "greedy path does not reach goal yet"
        self.status_bar.showMessage(
            f"{result.stopping_reason}: {result.total_episodes} episodes, "
            f"average reward {result.average_reward:.2f}, {outcome}"
        )

    def _on_error(self, message: str):
        QMessageBox.warning(self, "Q-Learning", message)

    def _update_button_states(self):
        state = self.controller.current_state
        running = state in (TrainingState.TRAINING, TrainingState.PAUSED)
        self.train_btn.setEnabled(self.controller.can_start_training())
        self.pause_btn.setEnabled(running)
        self.pause_btn.setText("Resume" if state == TrainingState.PAUSED else "Pause")
        self.stop_btn.setEnabled(running)
        for widget in [self.alpha_spin, self.gamma_spin, self.epsilon_spin, self.max_steps_spin]:
            widget.setEnabled(not running)

    def _update_status_message(self):
        self.status_bar.showMessage(self.controller.state_description)

    def closeEvent(self, event: QCloseEvent):
        self.controller.cleanup()
        super().closeEvent(event)
