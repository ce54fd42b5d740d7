from kivymd.app import MDApp
from kivymd.uix.list import TwoLineListItem
from kivymd.uix.screen import MDScreen

from ui.presenters import routine_progress_view


class RoutineListScreen(MDScreen):
    """List the available routines with their completion badge."""

    def on_pre_enter(self, *args):
        self.populate()
        return super().on_pre_enter(*args)

    def populate(self) -> None:
        app = MDApp.get_running_app()
        lst = self.ids.get("routine_list")
        if not lst or app is None or app.session is None:
            return
        session = app.session
        lst.clear_widgets()
        for routine in session.catalog.routines:
            view = routine_progress_view(
                session.completed_count(routine.id), session.total_count(routine.id)
            )
            text = routine.name
            if view["in_progress"]:
                text = f"{routine.name}  [{view['text']}]"
            count = len(routine.exercises)
            secondary = routine.description or f"{count} exercises"
            lst.add_widget(
                TwoLineListItem(
                    text=text,
                    secondary_text=secondary,
                    on_release=lambda _, r_id=routine.id: app.open_routine(r_id),
                )
            )
