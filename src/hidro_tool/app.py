"""App Kivy: formulario de calculo, seguimiento diario y exportacion."""

from __future__ import annotations

import traceback
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from hidro_tool.model import (
    ACTIVITY_LEVELS,
    ALTITUDES,
    CLIMATES,
    EXERCISE_INTENSITIES,
    GENDERS,
)
from hidro_tool.report import ReportLayout, write_hydration_xlsx
from hidro_tool.session import HydrationSession, SessionSnapshot
from hidro_tool.storage import AppConfig, MemoryStore, SQLiteStore, StorageUnavailable
from hidro_tool.units import kg_to_lbs, lbs_to_kg

QUICK_AMOUNTS = (250, 500, 750)
FLAG_FIELDS = ("pregnant", "breastfeeding", "illness", "kidney_disease")


def run_app() -> int:
    """Lanza la app Kivy."""
    from kivy.app import App
    from kivy.core.window import Window
    from kivy.uix.boxlayout import BoxLayout
    from kivy.uix.button import Button
    from kivy.uix.checkbox import CheckBox
    from kivy.uix.gridlayout import GridLayout
    from kivy.uix.label import Label
    from kivy.uix.popup import Popup
    from kivy.uix.scrollview import ScrollView
    from kivy.uix.spinner import Spinner
    from kivy.uix.textinput import TextInput

    class HidroToolApp(App):
        """Main Kivy app."""

        def __init__(self, **kwargs: object) -> None:
            super().__init__(**kwargs)
            self.sqlite: SQLiteStore | None
            try:
                self.sqlite = SQLiteStore(Path.cwd() / "hidro_tool.sqlite3")
                self.app_config = self.sqlite.load_config()
                self.session = HydrationSession(self.sqlite)
            except StorageUnavailable:
                self.sqlite = None
                self.app_config = AppConfig(export_dir="", weight_unit="kg")
                self.session = HydrationSession(MemoryStore())
            self.inputs: dict[str, TextInput] = {}
            self.choices: dict[str, Spinner] = {}
            self.flags: dict[str, CheckBox] = {}
            self.results: Label | None = None
            self.progress: Label | None = None
            self.intake_list: GridLayout | None = None
            self.intake_input: TextInput | None = None
            self.status: Label | None = None

        def build(self) -> BoxLayout:
            Window.bind(on_key_down=self._on_key_down, on_restore=self._on_restore)

            root = BoxLayout(orientation="vertical", spacing=8, padding=10)
            root.add_widget(self._build_form())

            actions = BoxLayout(orientation="horizontal", size_hint_y=None, height=40)
            for text, handler in (
                ("Calcular", self._on_calculate),
                ("Exportar Excel", self._on_export),
                ("Borrar todo", self._on_reset_all),
                ("Salir", lambda *_args: self.stop()),
            ):
                btn = Button(text=text)
                btn.bind(on_press=handler)
                actions.add_widget(btn)
            root.add_widget(actions)

            self.results = Label(text="", size_hint_y=None, height=160, halign="left")
            self.results.bind(size=self.results.setter("text_size"))
            root.add_widget(self.results)
            root.add_widget(self._build_tracker())

            self.status = Label(text="", size_hint_y=None, height=30)
            root.add_widget(self.status)
            self._refresh()
            return root

        def _build_form(self) -> GridLayout:
            form = GridLayout(cols=4, spacing=4, size_hint_y=None, height=200)
            profile = self.session.snapshot().profile

            def add_input(label: str, key: str, initial: str) -> None:
                form.add_widget(Label(text=label))
                inp = TextInput(text=initial, multiline=False)
                self.inputs[key] = inp
                form.add_widget(inp)

            def add_choice(
                label: str, key: str, values: tuple[str, ...], initial: str
            ) -> None:
                form.add_widget(Label(text=label))
                spinner = Spinner(text=initial, values=values)
                self.choices[key] = spinner
                form.add_widget(spinner)

            weight = ""
            if profile is not None:
                shown = profile.weight_kg
                if self.app_config.weight_unit == "lbs":
                    shown = kg_to_lbs(shown)
                weight = f"{shown:.1f}"
            add_input("Peso", "weight", weight)
            add_choice(
                "Unidad", "weight_unit", ("kg", "lbs"), self.app_config.weight_unit
            )
            self.choices["weight_unit"].bind(text=self._on_unit_change)
            add_input("Edad", "age", str(profile.age) if profile else "")
            add_choice("Sexo", "gender", GENDERS, profile.gender if profile else "")
            add_choice(
                "Actividad",
                "activity_level",
                ACTIVITY_LEVELS,
                profile.activity_level if profile else "",
            )
            add_input(
                "Ejercicio (min)",
                "exercise_minutes",
                str(profile.exercise_minutes) if profile else "0",
            )
            add_choice(
                "Intensidad",
                "exercise_intensity",
                EXERCISE_INTENSITIES,
                profile.exercise_intensity if profile else "medium",
            )
            add_choice("Clima", "climate", CLIMATES, profile.climate if profile else "")
            add_choice(
                "Altitud",
                "altitude",
                ALTITUDES,
                profile.altitude if profile else "sea-level",
            )
            for name in FLAG_FIELDS:
                form.add_widget(Label(text=name))
                chk = CheckBox(active=bool(profile and getattr(profile, name)))
                self.flags[name] = chk
                form.add_widget(chk)
            return form

        def _build_tracker(self) -> BoxLayout:
            box = BoxLayout(orientation="vertical", spacing=4)
            self.progress = Label(text="", size_hint_y=None, height=30)
            box.add_widget(self.progress)

            row = BoxLayout(orientation="horizontal", size_hint_y=None, height=40)
            self.intake_input = TextInput(hint_text="ml", multiline=False)
            self.intake_input.bind(on_text_validate=self._on_add)
            row.add_widget(self.intake_input)
            add_btn = Button(text="Agregar")
            add_btn.bind(on_press=self._on_add)
            row.add_widget(add_btn)
            for amount in QUICK_AMOUNTS:
                quick = Button(text=f"+{amount}")
                quick.bind(on_press=lambda _btn, a=amount: self._add_amount(a))
                row.add_widget(quick)
            reset_btn = Button(text="Reiniciar hoy")
            reset_btn.bind(on_press=self._on_reset_today)
            row.add_widget(reset_btn)
            box.add_widget(row)

            self.intake_list = GridLayout(cols=1, spacing=2, size_hint_y=None)
            self.intake_list.bind(minimum_height=self.intake_list.setter("height"))
            scroll = ScrollView()
            scroll.add_widget(self.intake_list)
            box.add_widget(scroll)
            return box

        def _on_key_down(
            self,
            _window: object,
            keycode: int,
            _scancode: int,
            _text: str,
            _modifiers: list[str],
        ) -> bool:
            # Esc: salir de fullscreen o cerrar app.
            if keycode != 27:
                return False
            if Window.fullscreen:
                Window.fullscreen = False
            else:
                self.stop()
            return True

        def _on_restore(self, *_args: object) -> None:
            self.on_resume()

        def on_resume(self) -> None:
            if self.session.on_resume():
                self._set_status("Nuevo dia: seguimiento reiniciado.")
            self._refresh()

        def on_stop(self) -> None:
            self.session.close()

        def _on_unit_change(self, _spinner: object, unit: str) -> None:
            inp = self.inputs.get("weight")
            if inp is None:
                return
            try:
                value = float(inp.text)
            except ValueError:
                value = 0.0
            if value > 0:
                converted = kg_to_lbs(value) if unit == "lbs" else lbs_to_kg(value)
                inp.text = f"{converted:.1f}"
            self.app_config = AppConfig(
                export_dir=self.app_config.export_dir, weight_unit=unit
            )
            if self.sqlite is not None:
                self.sqlite.save_config(self.app_config)

        def _form_values(self) -> dict[str, object]:
            values: dict[str, object] = {k: w.text for k, w in self.inputs.items()}
            values.update({k: w.text for k, w in self.choices.items()})
            values.update({k: w.active for k, w in self.flags.items()})
            return values

        def _on_calculate(self, _: object) -> None:
            result = self.session.calculate(self._form_values())
            if not result.ok:
                self._set_status(
                    "; ".join(f"{k}: {e.message}" for k, e in result.errors.items())
                )
                return
            self._refresh()

        def _on_add(self, _: object) -> None:
            if self.intake_input is None:
                return
            if self._add_amount(self.intake_input.text):
                self.intake_input.text = ""

        def _add_amount(self, amount: object) -> bool:
            result = self.session.add_intake(amount)
            self._refresh()
            return result.ok

        def _on_delete(self, entry_id: str) -> None:
            self.session.delete_intake(entry_id)
            self._refresh()

        def _on_reset_today(self, _: object) -> None:
            self._confirm(
                "Are you sure you want to reset today's tracking?",
                self.session.reset_today,
            )

        def _on_reset_all(self, _: object) -> None:
            self._confirm(
                "Are you sure you want to delete all data?", self.session.reset_all
            )

        def _confirm(self, question: str, action: Callable[[], object]) -> None:
            content = BoxLayout(orientation="vertical", spacing=8, padding=8)
            content.add_widget(Label(text=question))
            buttons = BoxLayout(orientation="horizontal", size_hint_y=None, height=40)
            cancel_btn = Button(text="Cancelar")
            ok_btn = Button(text="Confirmar")
            buttons.add_widget(cancel_btn)
            buttons.add_widget(ok_btn)
            content.add_widget(buttons)
            popup = Popup(title="Confirmar", content=content, size_hint=(0.6, 0.4))
            cancel_btn.bind(on_press=lambda *_args: popup.dismiss())

            def accept(*_: object) -> None:
                popup.dismiss()
                action()
                self._refresh()

            ok_btn.bind(on_press=accept)
            popup.open()

        def _on_export(self, _: object) -> None:
            snapshot = self.session.snapshot()
            if snapshot.goals is None:
                self._set_status("No hay datos para exportar.")
                return
            out_dir = (
                Path(self.app_config.export_dir).expanduser()
                if self.app_config.export_dir
                else Path.cwd() / "salidas"
            )
            timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
            out_path = out_dir / f"hidratacion_gui_{timestamp}.xlsx"
            try:
                write_hydration_xlsx(snapshot, out_path, ReportLayout())
            except Exception as exc:
                self._show_error("exportar", exc)
                return
            self._set_status(f"Excel generado: {out_path}")

        def _refresh(self) -> None:
            snapshot = self.session.snapshot()
            if self.results is not None:
                self.results.text = _results_text(snapshot)
            if self.progress is not None:
                self.progress.text = (
                    f"{snapshot.total_ml:,} ml / {snapshot.goal_ml:,} ml "
                    f"({round(snapshot.progress_percentage)}%)"
                )
            if self.intake_list is not None:
                self.intake_list.clear_widgets()
                if not snapshot.entries:
                    self.intake_list.add_widget(
                        Label(
                            text="No water intake recorded yet. Add your first entry!",
                            size_hint_y=None,
                            height=30,
                        )
                    )
                for entry in snapshot.entries:
                    row = BoxLayout(
                        orientation="horizontal", size_hint_y=None, height=30
                    )
                    label = f"{entry.amount_ml}ml  {entry.time_label}"
                    row.add_widget(Label(text=label))
                    delete_btn = Button(text="Borrar", size_hint_x=0.25)
                    delete_btn.bind(
                        on_press=lambda _btn, eid=entry.entry_id: self._on_delete(eid)
                    )
                    row.add_widget(delete_btn)
                    self.intake_list.add_widget(row)
            notes = self.session.notifications.active()
            if notes:
                self._set_status(notes[-1].message)

        def _set_status(self, text: str) -> None:
            if self.status is not None:
                self.status.text = text

        def _show_error(self, action: str, exc: Exception) -> None:
            error_type = type(exc).__name__
            self._set_status(f"Error al {action} ({error_type}): {exc}")
            if self.results is not None:
                self.results.text = traceback.format_exc()

    HidroToolApp().run()
    return 0


def _results_text(snapshot: SessionSnapshot) -> str:
    """Plain-text block with goals and recommendations for the results label."""
    if snapshot.goals is None:
        return "Completa el formulario y presiona Calcular."
    goals = snapshot.goals
    cups = round(goals.water_ml / 250)
    lines = [
        f"Agua: {goals.water_ml:,} ml ({cups} cups of 250ml)",
        f"Sodio {goals.sodium_mg:,} mg | Potasio {goals.potassium_mg:,} mg | "
        f"Magnesio {goals.magnesium_mg} mg | Calcio {goals.calcium_mg:,} mg",
    ]
    lines.extend(f"[{rec.severity}] {rec.text}" for rec in snapshot.recommendations)
    lines.extend(f"[warning] {text}" for text in snapshot.warnings)
    if snapshot.memory_only:
        lines.append("(sin almacenamiento: los datos no se guardan)")
    return "\n".join(lines)
