"""
Arcade front end: loop driver, renderer, audio and screens for human play

Controls:
    SPACE / click   flap (start a run from the menu)
    1 / 2 / 3       pick an upgrade while a choice is pending
    R               restart after game over
    M               back to the menu
    ESC             quit

Run:
    flappy-rogue --platform desktop
    python -m flappy_rogue.window --seed 7
"""

import argparse
from typing import Optional

import arcade

from .engine import GameEngine, Snapshot
from .entities import GameState, PickupKind, RunSummary
from .events import AudioSink, Cue, ScreenListener
from .persistence import StatsStore
from .physics import in_magnet_range
from .pickups import PICKUP_COLORS

TICK = 1 / 60

# Arcade's bundled sound resources, one per cue
CUE_SOUNDS = {
    Cue.FLAP: ":resources:sounds/jump1.wav",
    Cue.SCORE: ":resources:sounds/coin1.wav",
    Cue.POWERUP: ":resources:sounds/upgrade1.wav",
    Cue.HIT: ":resources:sounds/hit1.wav",
    Cue.DEATH: ":resources:sounds/gameover1.wav",
    Cue.UPGRADE: ":resources:sounds/upgrade4.wav",
    Cue.REVIVE: ":resources:sounds/phaseJump1.wav",
}

PICKUP_LABELS = {
    PickupKind.COIN: "$",
    PickupKind.HEART: "+",
    PickupKind.STAR: "*",
    PickupKind.CLOCK: "@",
    PickupKind.PHOENIX: "^",
}

RARITY_COLORS = {
    "common": (200, 200, 200),
    "rare": (52, 152, 219),
    "epic": (155, 89, 182),
    "legendary": (243, 156, 18),
}


class ArcadeAudio(AudioSink):
    """Plays each cue through arcade; sounds load on first use"""

    def __init__(self, volume: float = 0.5):
        self.volume = volume
        self._sounds = {}

    def play(self, cue: Cue) -> None:
        if self.volume <= 0:
            return
        sound = self._sounds.get(cue)
        if sound is None:
            sound = arcade.load_sound(CUE_SOUNDS[cue])
            self._sounds[cue] = sound
        arcade.play_sound(sound, volume=self.volume)


class WindowScreens(ScreenListener):
    """Remembers which view to draw and the last run summary"""

    def __init__(self):
        self.state = GameState.MENU
        self.summary: Optional[RunSummary] = None

    def on_state_change(self, state: GameState) -> None:
        self.state = state

    def on_run_summary(self, summary: RunSummary) -> None:
        self.summary = summary


class FlappyRogueWindow(arcade.Window):
    """Arcade window that draws engine snapshots and, when driving, ticks it"""

    def __init__(self, engine: GameEngine, drive: bool = True, title: str = "Flappy Rogue"):
        super().__init__(engine.width, engine.height, title)
        self.engine = engine
        self.drive = drive
        self._accumulator = 0.0

        self.screens = WindowScreens()
        if drive:
            self.engine.screen = self.screens

        # Colors
        self.AGENT_C = (243, 156, 18)
        self.SHIELD_C = (52, 152, 219, 160)
        self.GROUND_C = (139, 69, 19)
        self.GRASS_C = (46, 204, 113)
        self.HUD_C = (20, 20, 30)
        self.TEXT_C = (245, 245, 245)

    # ----------------------------
    # Loop driver
    # ----------------------------

    def on_update(self, delta_time: float):
        if not self.drive:
            return
        # Fixed timestep regardless of display refresh
        self._accumulator += min(delta_time, 0.25)
        while self._accumulator >= TICK:
            self.engine.update()
            self._accumulator -= TICK

    # ----------------------------
    # Input
    # ----------------------------

    def on_key_press(self, symbol: int, modifiers: int):
        state = self.engine.state
        if symbol == arcade.key.ESCAPE:
            self.close()
        elif symbol == arcade.key.SPACE:
            self._primary_action()
        elif state == GameState.CHOICE and symbol in (arcade.key.KEY_1, arcade.key.KEY_2, arcade.key.KEY_3):
            index = symbol - arcade.key.KEY_1
            if index < len(self.engine.offer):
                self.engine.select_upgrade(index)
        elif state == GameState.GAMEOVER and symbol == arcade.key.R:
            self.engine.start_run()
        elif state in (GameState.GAMEOVER, GameState.CHOICE) and symbol == arcade.key.M:
            self.engine.show_menu()

    def on_mouse_press(self, x: int, y: int, button: int, modifiers: int):
        self._primary_action()

    def _primary_action(self):
        if self.engine.state == GameState.MENU:
            self.engine.start_run()
        else:
            self.engine.activate()

    # ----------------------------
    # Rendering
    # ----------------------------

    def sy(self, y: float) -> float:
        """Simulation y grows downward, arcade y grows upward"""
        return self.height - y

    def on_draw(self):
        snap = self.engine.snapshot()
        self.clear()

        world = snap.world
        arcade.draw_lrbt_rect_filled(0, self.width, 0, self.height,
                                     (26, 26, 78) if snap.run and snap.run.slow_time_active else world.sky)

        if snap.state == GameState.MENU or snap.run is None:
            self._draw_menu(snap)
            return

        self._draw_world(snap)
        self._draw_hud(snap)

        if snap.state == GameState.CHOICE:
            self._draw_choice(snap)
        elif snap.state == GameState.GAMEOVER:
            self._draw_game_over(snap)

    def _draw_world(self, snap: Snapshot):
        run = snap.run
        pipe_c = snap.world.pipe

        for o in run.obstacles:
            # Top and bottom halves
            arcade.draw_lrbt_rect_filled(o.x, o.x + o.width, self.sy(o.gap_y), self.height, pipe_c)
            arcade.draw_lrbt_rect_filled(o.x, o.x + o.width, 0, self.sy(o.gap_y + o.gap_size), pipe_c)

        magnet_range = self.engine.config["magnet_range"]
        for p in run.pickups:
            color = PICKUP_COLORS[p.kind]
            if run.upgrades.magnetism and in_magnet_range(run.agent, p, magnet_range):
                arcade.draw_circle_outline(p.x, self.sy(p.y), p.radius + 4, color, 2)
            arcade.draw_circle_filled(p.x, self.sy(p.y), p.radius, color)
            arcade.draw_text(PICKUP_LABELS[p.kind], p.x, self.sy(p.y), self.HUD_C, 14,
                             anchor_x="center", anchor_y="center")

        for particle in run.particles:
            r, g, b = particle.color
            arcade.draw_circle_filled(particle.x, self.sy(particle.y), particle.size,
                                      (r, g, b, int(255 * particle.alpha)))

        agent = run.agent
        blink = run.invulnerable and (run.ticks // 6) % 2 == 0
        if not blink:
            if run.shield_active:
                arcade.draw_circle_outline(agent.x, self.sy(agent.y), agent.width / 2 + 10,
                                           self.SHIELD_C, 3)
            arcade.draw_ellipse_filled(agent.x, self.sy(agent.y), agent.width, agent.height,
                                       self.AGENT_C, -agent.rotation)

        arcade.draw_lrbt_rect_filled(0, self.width, 0, 20, self.GROUND_C)
        arcade.draw_lrbt_rect_filled(0, self.width, 17, 25, self.GRASS_C)

        if run.world_banner_timer > 0:
            arcade.draw_text(f"WORLD {run.world_index + 1}: {snap.world.name.upper()}",
                             self.width / 2, self.height * 0.7, self.TEXT_C, 22,
                             anchor_x="center", bold=True)

    def _draw_hud(self, snap: Snapshot):
        run = snap.run
        hearts = "♥" * run.health + "♡" * (run.max_health - run.health)
        extras = ""
        if run.shield_active:
            extras += "  [S]"
        if run.revive_banked:
            extras += "  [R]"
        arcade.draw_text(f"{run.score}", self.width / 2, self.height - 50, self.TEXT_C, 32,
                         anchor_x="center", bold=True)
        arcade.draw_text(hearts + extras, 12, self.height - 28, (231, 76, 60), 16)
        if run.combo >= 3:
            arcade.draw_text(f"x{run.combo} combo", self.width - 12, self.height - 28,
                             self.TEXT_C, 14, anchor_x="right")
        if run.celebration_timer > 0:
            arcade.draw_text("MILESTONE! +1 HEART", self.width / 2, self.height - 80,
                             (255, 215, 0), 14, anchor_x="center")

    def _draw_menu(self, snap: Snapshot):
        arcade.draw_text("FLAPPY ROGUE", self.width / 2, self.height * 0.65, self.TEXT_C, 32,
                         anchor_x="center", bold=True)
        arcade.draw_text("SPACE or click to start", self.width / 2, self.height * 0.5,
                         self.TEXT_C, 16, anchor_x="center")
        arcade.draw_text(f"High score: {snap.high_score}   Runs: {snap.total_runs}",
                         self.width / 2, self.height * 0.42, self.TEXT_C, 14, anchor_x="center")

    def _draw_choice(self, snap: Snapshot):
        arcade.draw_lrbt_rect_filled(0, self.width, 0, self.height, (10, 5, 20, 170))
        arcade.draw_text("CHOOSE AN UPGRADE", self.width / 2, self.height - 120, self.TEXT_C, 20,
                         anchor_x="center", bold=True)
        top = self.height - 170
        for i, upgrade in enumerate(snap.offer):
            y = top - i * 90
            color = RARITY_COLORS.get(upgrade.rarity, self.TEXT_C)
            arcade.draw_lrbt_rect_outline(30, self.width - 30, y - 70, y, color, 2)
            arcade.draw_text(f"{i + 1}. {upgrade.name}", 45, y - 28, self.TEXT_C, 16, bold=True)
            arcade.draw_text(upgrade.rarity.upper(), self.width - 45, y - 28, color, 11,
                             anchor_x="right")
            arcade.draw_text(upgrade.description, 45, y - 55, self.TEXT_C, 12)

    def _draw_game_over(self, snap: Snapshot):
        summary = self.screens.summary or self.engine.summary
        arcade.draw_lrbt_rect_filled(0, self.width, 0, self.height, (0, 0, 0, 150))
        arcade.draw_text("GAME OVER", self.width / 2, self.height * 0.65, self.TEXT_C, 30,
                         anchor_x="center", bold=True)
        if summary is not None:
            lines = [
                f"Score: {summary.score}" + ("  NEW BEST!" if summary.new_high_score else ""),
                f"Pipes passed: {summary.obstacles_cleared}",
                f"Power-ups: {summary.pickups_collected}",
                f"High score: {summary.high_score}",
            ]
            for i, line in enumerate(lines):
                arcade.draw_text(line, self.width / 2, self.height * 0.55 - i * 26,
                                 self.TEXT_C, 15, anchor_x="center")
        arcade.draw_text("R to restart, M for menu", self.width / 2, self.height * 0.3,
                         self.TEXT_C, 13, anchor_x="center")


def main():
    parser = argparse.ArgumentParser(description="Play Flappy Rogue")
    parser.add_argument(
        "--platform",
        type=str,
        default="desktop",
        choices=["desktop", "mobile"],
        help="Playfield profile (default: desktop)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for a reproducible run",
    )
    parser.add_argument(
        "--volume",
        type=float,
        default=0.5,
        help="Sound volume 0..1 (default: 0.5)",
    )
    parser.add_argument(
        "--stats",
        type=str,
        default=None,
        help="Path to the stats file (default: ~/.flappy_rogue/stats.json)",
    )
    parser.add_argument(
        "--verbose",
        type=int,
        default=1,
        help="Console verbosity (default: 1)",
    )

    args = parser.parse_args()

    engine = GameEngine(
        platform=args.platform,
        seed=args.seed,
        audio=ArcadeAudio(volume=args.volume),
        stats=StatsStore(args.stats, verbose=args.verbose),
        verbose=args.verbose,
    )
    FlappyRogueWindow(engine)
    arcade.run()


if __name__ == "__main__":
    main()
