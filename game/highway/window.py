"""
Arcade host for the lane driving game

Draws WorldSnapshots with arcade primitives. In interactive mode the window
also owns a GameLoop: arcade's on_update cadence supplies frame timestamps and
key presses become session intents.
"""

from __future__ import annotations

from typing import Optional

import arcade

from .config import GameConfig
from .loop import GameLoop
from .session import GameSession, GameState, Intent
from .utils import clamp

KEY_INTENTS = {
    arcade.key.LEFT: Intent.LEFT,
    arcade.key.A: Intent.LEFT,
    arcade.key.RIGHT: Intent.RIGHT,
    arcade.key.D: Intent.RIGHT,
    arcade.key.SPACE: Intent.START,
    arcade.key.ENTER: Intent.START,
    arcade.key.P: Intent.PAUSE,
}

STATE_BANNERS = {
    GameState.SPLASH: "HIGHWAY RUSH - press SPACE to start",
    GameState.LOADING: "Loading...",
    GameState.PAUSED: "Paused - press P to resume",
    GameState.GAME_OVER: "GAME OVER - press SPACE to retry",
    GameState.LEAD_FORM: "YOU MADE IT! - press SPACE to play again",
}


class HighwayWindow(arcade.Window):
    """Arcade window rendering (and optionally driving) a GameSession"""

    def __init__(self, session: GameSession, interactive: bool = False, title: str = "Highway Rush"):
        cfg = session.config
        super().__init__(int(cfg.width), int(cfg.height), title)
        self.session = session
        self.interactive = interactive
        self.loop = GameLoop(session)
        self._now_ms = 0.0

        # Colors
        self.BG = (26, 26, 26)
        self.CENTER_LINE_C = (255, 215, 0)
        self.EDGE_C = (255, 255, 255)
        self.PLAYER_C = (80, 200, 120)
        self.SHIELD_C = (80, 160, 255, 90)
        self.COIN_C = (255, 215, 0)
        self.POWERUP_C = (52, 152, 219)
        self.HAZARD_C = {"light": (255, 140, 0), "road_work": (230, 126, 34), "crossing": (160, 110, 60)}
        self.HUD_C = (220, 220, 220)

    # ----------------------------
    # Host loop
    # ----------------------------

    def on_update(self, delta_time: float):
        if not self.interactive:
            return
        self._now_ms += delta_time * 1000.0
        self.loop.on_frame(self._now_ms, self.loop.generation)

    def on_key_press(self, symbol: int, modifiers: int):
        if not self.interactive:
            return
        if symbol == arcade.key.ESCAPE:
            self.close()
            return
        intent = KEY_INTENTS.get(symbol)
        if intent is None:
            return
        self.session.handle_input(intent)
        if self.session.is_running and not self.loop.running:
            self.loop.start(self._now_ms)
        elif not self.session.is_running:
            self.loop.stop()

    # ----------------------------
    # Drawing
    # ----------------------------

    def _sy(self, y: float) -> float:
        # world y grows downward, arcade y grows upward
        return self.height - y

    def _box(self, obj, color):
        left = obj.x - obj.width / 2
        top = self._sy(obj.y - obj.height / 2)
        arcade.draw_lrbt_rectangle_filled(left, left + obj.width, top - obj.height, top, color)

    def _draw_road(self, snap):
        cfg = self.session.config
        w, h = self.width, self.height
        for x in (80, 85, w - 85, w - 80):
            arcade.draw_lrbt_rectangle_filled(x - 1.5, x + 1.5, 0, h, self.EDGE_C)

        # dashed center line, scrolling with the road offset
        dash = cfg.road_pattern / 2
        y = -cfg.road_pattern + snap.road_offset
        while y < h:
            arcade.draw_lrbt_rectangle_filled(w / 2 - 2, w / 2 + 2, self._sy(y + dash), self._sy(y), self.CENTER_LINE_C)
            y += cfg.road_pattern

    def on_draw(self):
        """Draw the current snapshot"""
        self.clear(color=self.BG)
        snap = self.session.get_snapshot()

        self._draw_road(snap)

        for coin in snap.coins:
            arcade.draw_circle_filled(coin.x, self._sy(coin.y), coin.width / 2, self.COIN_C)

        for powerup in snap.powerups:
            self._box(powerup, self.POWERUP_C)
            arcade.draw_text("S", powerup.x, self._sy(powerup.y), self.EDGE_C, 14,
                             anchor_x="center", anchor_y="center")

        for hazard in snap.hazards:
            color = self.HAZARD_C.get(hazard.type, self.HUD_C)
            if hazard.type == "light" and not hazard.lit:
                color = (90, 50, 0)
            self._box(hazard, color)

        for npc in snap.npcs:
            self._box(npc, npc.color)

        player = snap.player
        self._box(player, self.PLAYER_C)
        if snap.shield_active:
            arcade.draw_circle_filled(player.x, self._sy(player.y), player.height * 0.6, self.SHIELD_C)

        for p in snap.particles:
            r, g, b = p.color[:3]
            arcade.draw_circle_filled(p.x, self._sy(p.y), p.size / 2, (r, g, b, int(255 * p.alpha)))

        self._draw_hud(snap)

    def _draw_hud(self, snap):
        # Power bar
        bar_w, bar_h = 80, 15
        x0, y0 = 10, self.height - 30
        arcade.draw_lrbt_rectangle_filled(x0, x0 + bar_w, y0, y0 + bar_h, (60, 60, 60))
        ratio = clamp(snap.power / snap.max_power, 0, 1)
        if snap.power > 50:
            fill_c = (39, 174, 96)
        elif snap.power > 25:
            fill_c = (243, 156, 18)
        else:
            fill_c = (231, 76, 60)
        if ratio > 0:
            arcade.draw_lrbt_rectangle_filled(x0, x0 + bar_w * ratio, y0, y0 + bar_h, fill_c)

        seconds_left = int(-(-snap.time_remaining_ms // 1000))
        txt = f"P:{round(snap.power)}  Score: {snap.score}  Time: {seconds_left}s"
        if snap.combo >= 2:
            txt += f"  x{snap.combo}"
        arcade.draw_text(txt, x0 + bar_w + 8, y0 + 1, self.HUD_C, 12)

        banner = STATE_BANNERS.get(GameState(snap.state))
        if banner:
            arcade.draw_text(banner, self.width / 2, self.height / 2, self.HUD_C, 16,
                             anchor_x="center", anchor_y="center")
            if self.session.is_terminal:
                arcade.draw_text(f"Final score: {snap.score}", self.width / 2, self.height / 2 - 28,
                                 self.HUD_C, 14, anchor_x="center", anchor_y="center")


def run_human_game(config: Optional[GameConfig] = None, seed: Optional[int] = None):
    """Open a window and play with the keyboard"""
    session = GameSession(config, rng=seed)
    HighwayWindow(session, interactive=True)
    arcade.run()


if __name__ == "__main__":
    # Use: python -m game.highway.window
    run_human_game()
