from kivy.clock import Clock
from kivy.properties import BooleanProperty, NumericProperty, StringProperty
from kivymd.app import MDApp
from kivymd.uix.screen import MDScreen

from backend import DISPLAY_REFRESH_INTERVAL
from ui.exercise_card import ExerciseCard
from ui.presenters import routine_progress_view, stopwatch_text


class RoutineDetailScreen(MDScreen):
    """Exercise cards, routine stopwatch and progress for the open routine.

    Cards are rebuilt when the screen is entered and refreshed whenever the
    session reports a change.  The stopwatch label has its own refresh
    event because the stopwatch does not drive the tick scheduler.
    """

    title = StringProperty("")
    stopwatch_label = StringProperty("00:00")
    stopwatch_running = BooleanProperty(False)
    progress_text = StringProperty("0 / 0")
    progress_value = NumericProperty(0)
    complete_text = StringProperty("")

    _refresh_event = None

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._cards: list[ExerciseCard] = []

    @property
    def session(self):
        app = MDApp.get_running_app()
        return app.session if app else None

    def on_pre_enter(self, *args):
        self.populate()
        if self.session is not None:
            self.session.add_listener(self._on_session_changed)
        return super().on_pre_enter(*args)

    def on_enter(self, *args):
        if self._refresh_event is None:
            self._refresh_event = Clock.schedule_interval(
                self._refresh_stopwatch, DISPLAY_REFRESH_INTERVAL
            )
        return super().on_enter(*args)

    def on_leave(self, *args):
        if self._refresh_event is not None:
            self._refresh_event.cancel()
            self._refresh_event = None
        if self.session is not None:
            self.session.remove_listener(self._on_session_changed)
        return super().on_leave(*args)

    def populate(self) -> None:
        container = self.ids.get("exercise_list")
        session = self.session
        if container is None or session is None:
            return
        container.clear_widgets()
        self._cards = []
        routine = session.current_routine
        if routine is None:
            self.title = ""
            return
        self.title = routine.name
        for exercise in routine.exercises:
            card = ExerciseCard(routine.id, exercise)
            container.add_widget(card)
            self._cards.append(card)
        self.refresh()

    def refresh(self) -> None:
        session = self.session
        routine = session.current_routine if session else None
        if routine is None:
            return
        for card in self._cards:
            card.update(session)
        view = routine_progress_view(
            session.completed_count(routine.id), session.total_count(routine.id)
        )
        self.progress_text = view["text"]
        self.progress_value = view["fraction"] * 100
        self.complete_text = view["complete_text"]
        self._refresh_stopwatch()

    def _refresh_stopwatch(self, *_):
        session = self.session
        if session is None:
            return
        self.stopwatch_label = stopwatch_text(session.stopwatch_elapsed_ms())
        self.stopwatch_running = session.stopwatch.running

    def _on_session_changed(self, session) -> None:
        if session.current_routine is None:
            return
        self.refresh()

    def toggle_stopwatch(self) -> None:
        self.session.toggle_stopwatch()

    def reset_stopwatch(self) -> None:
        self.session.reset_stopwatch()
