from kivy.metrics import dp
from kivymd.app import MDApp
from kivymd.uix.boxlayout import MDBoxLayout
from kivymd.uix.button import MDIconButton, MDRaisedButton
from kivymd.uix.card import MDCard
from kivymd.uix.label import MDLabel
from kivymd.uix.progressbar import MDProgressBar

from backend.routines import ExerciseDef
from ui.presenters import reps_exercise_view, timed_exercise_view

# Card background when an exercise is finished
COMPLETED_COLOR = (0.85, 0.95, 0.85, 1)
DEFAULT_COLOR = (1, 1, 1, 1)


class ExerciseCard(MDCard):
    """Card showing one exercise of the open routine with its controls.

    The widgets are built once; :meth:`update` only rewrites their text and
    state so the card can be refreshed on every timer tick.
    """

    def __init__(self, routine_id: str, exercise: ExerciseDef, **kwargs):
        super().__init__(
            orientation="vertical",
            padding=dp(12),
            spacing=dp(6),
            adaptive_height=True,
            **kwargs,
        )
        self.routine_id = routine_id
        self.exercise = exercise

        header = MDBoxLayout(orientation="horizontal", adaptive_height=True)
        header.add_widget(MDLabel(text=exercise.name, font_style="H6", adaptive_height=True))
        header.add_widget(
            MDLabel(
                text="Time" if exercise.is_timed else "Reps",
                halign="right",
                theme_text_color="Secondary",
                adaptive_height=True,
            )
        )
        self.add_widget(header)
        self.info_label = MDLabel(theme_text_color="Secondary", adaptive_height=True)
        self.add_widget(self.info_label)

        self.value_label = MDLabel(font_style="H3", halign="center", adaptive_height=True)
        self.status_label = MDLabel(halign="center", adaptive_height=True)
        self.detail_label = MDLabel(halign="center", adaptive_height=True)
        self.progress_bar = MDProgressBar(value=0, size_hint_y=None, height=dp(4))
        for widget in (self.value_label, self.status_label, self.detail_label, self.progress_bar):
            self.add_widget(widget)

        buttons = MDBoxLayout(
            orientation="horizontal", adaptive_size=True, spacing=dp(8), pos_hint={"center_x": 0.5}
        )
        if exercise.is_timed:
            self.left_btn = MDIconButton(icon="restart", on_release=self._reset)
            self.main_btn = MDRaisedButton(text="Start", on_release=self._toggle)
            self.right_btn = MDIconButton(icon="skip-next", on_release=self._skip)
        else:
            self.left_btn = MDIconButton(icon="minus", on_release=self._decrement)
            self.main_btn = MDRaisedButton(text="Set done", on_release=self._increment)
            self.right_btn = MDIconButton(icon="restart", on_release=self._reset)
        for btn in (self.left_btn, self.main_btn, self.right_btn):
            buttons.add_widget(btn)
        self.add_widget(buttons)

    @property
    def session(self):
        return MDApp.get_running_app().session

    def update(self, session) -> None:
        ex = self.exercise
        if ex.is_timed:
            view = timed_exercise_view(
                ex,
                session.phase_timer(self.routine_id, ex.id),
                session.progress(self.routine_id, ex.id),
            )
            self.value_label.text = view["time_text"]
            self.status_label.text = view["phase_text"]
            self.detail_label.text = view["set_text"]
            self.main_btn.text = view["toggle_text"]
            self.main_btn.disabled = view["controls_disabled"]
            self.right_btn.disabled = view["controls_disabled"]
        else:
            view = reps_exercise_view(
                ex,
                session.progress(self.routine_id, ex.id),
                session.rest_countdown(self.routine_id, ex.id),
            )
            self.value_label.text = view["counter_text"]
            self.status_label.text = f"Rest {view['rest_text']}" if view["resting"] else "Sets done"
            self.detail_label.text = view["target_text"]
            self.left_btn.disabled = view["decrement_disabled"]
            self.main_btn.disabled = view["increment_disabled"]
        self.info_label.text = view["info_text"]
        self.progress_bar.value = view["ring_progress"] * 100
        self.md_bg_color = COMPLETED_COLOR if view["completed"] else DEFAULT_COLOR

    def _toggle(self, *_):
        self.session.toggle_timer(self.routine_id, self.exercise.id)

    def _skip(self, *_):
        self.session.skip_timer(self.routine_id, self.exercise.id)

    def _increment(self, *_):
        self.session.increment_set(self.routine_id, self.exercise.id)

    def _decrement(self, *_):
        self.session.decrement_set(self.routine_id, self.exercise.id)

    def _reset(self, *_):
        if self.exercise.is_timed:
            self.session.reset_timer(self.routine_id, self.exercise.id)
        else:
            self.session.reset_sets(self.routine_id, self.exercise.id)
