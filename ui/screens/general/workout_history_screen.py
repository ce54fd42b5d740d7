from kivymd.app import MDApp
from kivymd.uix.button import MDFlatButton, MDRaisedButton
from kivymd.uix.dialog import MDDialog
from kivymd.uix.list import OneLineListItem, ThreeLineListItem
from kivymd.uix.screen import MDScreen

from ui.presenters import history_entry_view


class WorkoutHistoryScreen(MDScreen):
    """Display completed routines, newest first."""

    _dialog = None

    def on_pre_enter(self, *args):
        """Populate the history list before the screen becomes visible."""
        self.populate()
        return super().on_pre_enter(*args)

    def populate(self) -> None:
        app = MDApp.get_running_app()
        lst = self.ids.get("history_list")
        if not lst or app is None or app.session is None or app.session.history is None:
            return
        lst.clear_widgets()
        entries = app.session.history.entries()
        if not entries:
            lst.add_widget(OneLineListItem(text="No workouts yet"))
            return
        for entry in entries:
            view = history_entry_view(entry)
            lst.add_widget(
                ThreeLineListItem(
                    text=view["title"],
                    secondary_text=view["date_text"],
                    tertiary_text=f"{view['duration_text']}  ·  {view['exercises_text']}",
                    on_release=lambda _, e_id=entry.id: self.confirm_delete(e_id),
                )
            )

    def confirm_delete(self, entry_id: str) -> None:
        def delete(*_):
            dialog.dismiss()
            app = MDApp.get_running_app()
            if app.session.history is not None:
                app.session.history.delete(entry_id)
            self.populate()

        dialog = MDDialog(
            text="Delete this workout?",
            buttons=[
                MDFlatButton(text="Cancel", on_release=lambda *_: dialog.dismiss()),
                MDRaisedButton(text="Delete", on_release=delete),
            ],
        )
        dialog.open()
        self._dialog = dialog

    def confirm_clear(self) -> None:
        """Ask before removing every history entry."""

        def clear(*_):
            dialog.dismiss()
            app = MDApp.get_running_app()
            if app.session.history is not None:
                app.session.history.clear()
            self.populate()

        dialog = MDDialog(
            text="Clear workout history?",
            buttons=[
                MDFlatButton(text="Cancel", on_release=lambda *_: dialog.dismiss()),
                MDRaisedButton(text="Clear", on_release=clear),
            ],
        )
        dialog.open()
        self._dialog = dialog
