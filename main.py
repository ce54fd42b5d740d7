import logging
import os
import sys
from pathlib import Path

from kivy.core.window import Window
from kivy.lang import Builder
from kivymd.app import MDApp

from backend import settings
from backend.alerts import AlertSystem
from backend.scheduler import TickScheduler
from backend.sounds import SoundSystem
from core import DEFAULT_TICK_INTERVAL, open_workout_session
from ui.screens import RoutineDetailScreen, RoutineListScreen, WorkoutHistoryScreen  # noqa: F401


if os.name == "nt" or sys.platform.startswith("win"):
    Window.size = (280, 280 * (20 / 9))


class WorkoutApp(MDApp):
    session = None
    scheduler: TickScheduler | None = None

    def build(self):
        sound = SoundSystem(volume=float(settings.get_value("sound_level") or 1.0))
        self.session = open_workout_session(alerts=AlertSystem(sound=sound))
        interval = settings.get_value("tick_interval") or DEFAULT_TICK_INTERVAL
        self.scheduler = TickScheduler(self.session.tick, interval=float(interval))
        self.session.attach_scheduler(self.scheduler)
        return Builder.load_file(str(Path(__file__).with_name("main.kv")))

    def on_start(self):
        if self.session.current_routine is not None:
            self.root.current = "routine_detail"
        else:
            self.show_routines()

    def show_routines(self):
        screen = self.root.get_screen("routine_list")
        if self.root.current == "routine_list":
            screen.populate()
        self.root.current = "routine_list"

    def open_routine(self, routine_id: str):
        if self.session.open_routine(routine_id):
            self.root.current = "routine_detail"

    def go_back(self):
        self.session.close_routine()
        self.show_routines()

    def complete_routine(self):
        routine = self.session.current_routine
        if routine is None:
            return
        self.session.complete_routine(routine.id)
        self.show_routines()

    def open_history(self):
        self.root.current = "history"

    def on_pause(self):
        self.session.save()
        return True

    def on_resume(self):
        # catch up on time elapsed while the app was in the background
        self.session.tick()

    def on_stop(self):
        if self.scheduler is not None:
            self.scheduler.stop()
        if not self.session.save():
            logging.warning("Session state could not be saved on exit")


if __name__ == "__main__":
    WorkoutApp().run()
