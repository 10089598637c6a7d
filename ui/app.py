# ui/app.py
import sys
import tkinter as tk
from tkinter import messagebox
from typing import Optional

import ttkbootstrap as ttkb
from ttkbootstrap.constants import *

from core.config import ConfigError, load_engine_settings
from core.db import Database
from core.logger import get_logger
from core.models import Character, GameEngineState
from data_access.memory_provider import MemoryDataProvider
from data_access.provider import WorldDataProvider
from logic.engine import GameEngine
from logic.inventory import format_gold
from logic.navigator import CLASS_IDS, RACE_IDS
from logic.zone_manager import ACTION_LABELS

logger = get_logger(__name__)

class LevelerApp(ttkb.Window):
    """Read-only view over engine snapshots plus the manual controls."""

    def __init__(self, world_path: Optional[str] = None):
        super().__init__(themename="superhero")
        self.title("Idle Leveler")
        self.geometry("1100x760")

        self.settings = load_engine_settings()
        self.db: Optional[Database] = None
        if world_path:
            self.provider = MemoryDataProvider.from_yaml(world_path)
        else:
            self.db = Database()
            self.provider = WorldDataProvider(self.db)

        self.engine: Optional[GameEngine] = None
        self._shown_log = 0

        self.create_widgets()
        self.protocol("WM_DELETE_WINDOW", self.on_closing)

    def create_widgets(self):
        header = ttkb.Frame(self, padding=10, bootstyle=PRIMARY)
        header.pack(fill=tk.X)
        ttkb.Label(header, text="Idle Leveler", font=("Segoe UI Bold", 18), bootstyle=LIGHT).pack(side=tk.LEFT, padx=10)

        # --- Character ---
        toolbar = ttkb.Frame(self, padding=5)
        toolbar.pack(fill=tk.X)

        ttkb.Label(toolbar, text="Name:").pack(side=tk.LEFT)
        self.name_var = tk.StringVar(value="Adventurer")
        ttkb.Entry(toolbar, textvariable=self.name_var, width=14).pack(side=tk.LEFT, padx=5)

        self.race_combo = ttkb.Combobox(toolbar, values=list(RACE_IDS), width=10, state="readonly")
        self.race_combo.set("Human")
        self.race_combo.pack(side=tk.LEFT, padx=5)

        self.class_combo = ttkb.Combobox(toolbar, values=list(CLASS_IDS), width=10, state="readonly")
        self.class_combo.set("Warrior")
        self.class_combo.pack(side=tk.LEFT, padx=5)

        self.start_btn = ttkb.Button(toolbar, text="Start", bootstyle=SUCCESS, command=self.start_engine)
        self.start_btn.pack(side=tk.LEFT, padx=5)
        self.pause_btn = ttkb.Button(toolbar, text="Pause", bootstyle=WARNING, command=self.toggle_pause, state=DISABLED)
        self.pause_btn.pack(side=tk.LEFT, padx=5)

        self.auto_var = tk.BooleanVar(value=False)
        ttkb.Checkbutton(toolbar, text="Auto mode", variable=self.auto_var, bootstyle="round-toggle",
                         command=self.toggle_mode).pack(side=tk.LEFT, padx=10)

        body = ttkb.Frame(self, padding=5)
        body.pack(fill=tk.BOTH, expand=True)

        # --- Status ---
        status = ttkb.LabelFrame(body, text="Character")
        status.pack(side=tk.LEFT, fill=tk.Y, padx=(0, 5))

        self.status_vars = {}
        for key in ("level", "zone", "state", "gold", "quest"):
            row = ttkb.Frame(status, padding=3)
            row.pack(fill=tk.X)
            ttkb.Label(row, text=f"{key.capitalize()}:", width=8, font=("Segoe UI Bold", 10)).pack(side=tk.LEFT)
            var = tk.StringVar(value="-")
            ttkb.Label(row, textvariable=var, width=32, wraplength=260).pack(side=tk.LEFT)
            self.status_vars[key] = var

        ttkb.Label(status, text="Experience").pack(anchor=tk.W, padx=5, pady=(10, 0))
        self.xp_bar = ttkb.Progressbar(status, maximum=100, bootstyle=INFO)
        self.xp_bar.pack(fill=tk.X, padx=5, pady=2)
        ttkb.Label(status, text="Travel").pack(anchor=tk.W, padx=5, pady=(10, 0))
        self.travel_bar = ttkb.Progressbar(status, maximum=100, bootstyle=SUCCESS)
        self.travel_bar.pack(fill=tk.X, padx=5, pady=2)

        self.objectives_var = tk.StringVar(value="")
        ttkb.Label(status, textvariable=self.objectives_var, justify=tk.LEFT, wraplength=300).pack(anchor=tk.W, padx=5, pady=10)

        self.actions_frame = ttkb.LabelFrame(status, text="Actions")
        self.actions_frame.pack(fill=tk.X, padx=5, pady=5)
        self._shown_actions = ()

        # --- Log ---
        log_frame = ttkb.LabelFrame(body, text="Action log")
        log_frame.pack(side=tk.LEFT, fill=tk.BOTH, expand=True)
        self.log_text = tk.Text(log_frame, wrap=tk.WORD, state=tk.DISABLED, font=("Consolas", 10))
        self.log_text.pack(fill=tk.BOTH, expand=True, padx=5, pady=5)

    def start_engine(self):
        character = Character(
            name=self.name_var.get().strip() or "Adventurer",
            race=self.race_combo.get(),
            char_class=self.class_combo.get(),
        )
        self.engine = GameEngine(character, self.provider, settings=self.settings)
        self.engine.start()
        if self.auto_var.get():
            self.engine.set_mode('auto')

        self.start_btn.configure(state=DISABLED)
        self.pause_btn.configure(state=NORMAL)
        self.render(self.engine.get_state())
        self.after(int(self.settings.tick_interval * 1000), self.on_tick)

    def on_tick(self):
        if not self.engine:
            return
        self.engine.tick()
        self.render(self.engine.get_state())
        if self.engine.running:
            self.after(int(self.settings.tick_interval * 1000), self.on_tick)
        else:
            self.pause_btn.configure(state=DISABLED)

    def toggle_pause(self):
        if not self.engine:
            return
        if self.engine.is_paused:
            self.engine.resume()
            self.pause_btn.configure(text="Pause")
        else:
            self.engine.pause()
            self.pause_btn.configure(text="Resume")
        self.render(self.engine.get_state())

    def toggle_mode(self):
        if self.engine:
            self.engine.set_mode('auto' if self.auto_var.get() else 'manual')
            self.render(self.engine.get_state())

    def run_action(self, action: str):
        if self.engine:
            self.engine.execute_action(action)
            self.render(self.engine.get_state())

    def render(self, state: GameEngineState):
        char = state.character
        self.status_vars["level"].set(f"{char.name} - level {char.level} {char.race} {char.char_class}")
        self.status_vars["zone"].set(self.engine.zone_manager.get_zone_info(char.position))
        self.status_vars["state"].set(state.current_state + (" (paused)" if state.is_paused else ""))
        self.status_vars["gold"].set(format_gold(state.gold))
        self.status_vars["quest"].set(state.current_quest.quest_name if state.current_quest else "-")

        self.xp_bar.configure(value=self.engine.ledger.progress_to_next_level(char.level, char.experience))
        self.travel_bar.configure(value=self.engine.travel_progress() * 100)

        if state.current_quest:
            self.objectives_var.set("\n".join(
                f"{'[x]' if o.completed else '[ ]'} {o.target_name}: {o.current}/{o.required}"
                for o in state.current_quest.objectives))
        else:
            self.objectives_var.set("")

        self.render_actions(state)
        self.render_log(state)

    def render_actions(self, state: GameEngineState):
        actions = state.available_actions if state.mode == 'manual' else ()
        if actions == self._shown_actions:
            return
        for child in self.actions_frame.winfo_children():
            child.destroy()
        for action in actions:
            ttkb.Button(self.actions_frame, text=ACTION_LABELS.get(action, action), bootstyle="outline",
                        command=lambda a=action: self.run_action(a)).pack(fill=tk.X, padx=5, pady=2)
        self._shown_actions = actions

    def render_log(self, state: GameEngineState):
        # The snapshot log is capped, so count new lines from the engine total.
        lines = state.action_log
        new = min(len(lines), self.engine.log_total - self._shown_log)
        self._shown_log = self.engine.log_total
        if new <= 0:
            return
        self.log_text.configure(state=tk.NORMAL)
        self.log_text.insert(tk.END, "\n".join(lines[len(lines) - new:]) + "\n")
        self.log_text.see(tk.END)
        self.log_text.configure(state=tk.DISABLED)

    def on_closing(self):
        if self.engine:
            self.engine.stop()
        if self.db:
            self.db.close()
        self.destroy()

if __name__ == "__main__":
    try:
        app = LevelerApp(sys.argv[1] if len(sys.argv) > 1 else None)
    except ConfigError as e:
        messagebox.showerror("Configuration error", str(e))
        raise SystemExit(1)
    app.mainloop()
