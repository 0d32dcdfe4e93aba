"""
Paper Snake - pygame front end

Draws the grid, territory and trail, maps keys to directions and runs the
name entry and game over screens. All game rules live in paper_snake.engine;
this module only feeds it input and reads its state back.

Controls:
- Arrow keys or WASD to steer
- ENTER to start / play again, ESC to quit
"""

import logging
import sys
from enum import IntEnum
from typing import Optional

import pygame

from paper_snake.config import GameConfig
from paper_snake.driver import TickDriver
from paper_snake.engine import Direction, SimulationSession


logger = logging.getLogger(__name__)


# ============================================================================
# CONSTANTS
# ============================================================================

class Screen(IntEnum):
    """Which screen the front end is showing."""
    NAME_ENTRY = 0
    PLAYING = 1
    GAMEOVER = 2


VIEWPORT_SIZE = (800, 600)
NAME_MAX_LENGTH = 15

COLORS = {
    "background": (0, 0, 0),
    "grid": (20, 20, 20),
    "snake": (0, 229, 204),
    "territory": (0, 229, 204),
    "trail": (0, 229, 204, 102),
    "text": (0, 229, 204),
    "muted": (140, 140, 140),
    "danger": (255, 80, 80),
}

KEY_DIRECTIONS = {
    pygame.K_UP: Direction.UP,
    pygame.K_DOWN: Direction.DOWN,
    pygame.K_LEFT: Direction.LEFT,
    pygame.K_RIGHT: Direction.RIGHT,
    pygame.K_w: Direction.UP,
    pygame.K_s: Direction.DOWN,
    pygame.K_a: Direction.LEFT,
    pygame.K_d: Direction.RIGHT,
}


def direction_for_key(key: int) -> Optional[Direction]:
    """Map a pygame key code to a direction, or None for other keys."""
    return KEY_DIRECTIONS.get(key)


# ============================================================================
# NAME ENTRY
# ============================================================================

class NameEntry:
    """Text buffer behind the name entry screen."""

    __slots__ = ['text', 'max_length']

    def __init__(self, max_length: int = NAME_MAX_LENGTH):
        self.text = ""
        self.max_length = max_length

    def insert(self, chars: str):
        """Append typed characters, ignoring anything past max_length."""
        printable = "".join(c for c in chars if c.isprintable())
        self.text = (self.text + printable)[:self.max_length]

    def backspace(self):
        self.text = self.text[:-1]

    def submit(self) -> Optional[str]:
        """Return the trimmed name, or None if it is blank."""
        name = self.text.strip()
        return name or None


# ============================================================================
# MAIN GAME CLASS
# ============================================================================

class PaperSnakeGame:
    """
    Window, input and rendering around a SimulationSession.

    A new session and driver are built for every game; nothing carries over
    from a finished one except the player's name.
    """

    def __init__(self, viewport=VIEWPORT_SIZE):
        """Open the window and show the name entry screen."""
        pygame.init()
        self.config = GameConfig.from_viewport(*viewport)
        self.screen = pygame.display.set_mode((self.config.screen_width, self.config.screen_height))
        pygame.display.set_caption("Paper Snake")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("consolas", 16, bold=True)
        self.small_font = pygame.font.SysFont("consolas", 12, bold=True)
        self.title_font = pygame.font.SysFont("consolas", 56, bold=True)
        self.menu_font = pygame.font.SysFont("consolas", 24, bold=True)
        self.trail_surface = pygame.Surface(self.screen.get_size(), pygame.SRCALPHA)

        self.game_screen = Screen.NAME_ENTRY
        self.name_entry = NameEntry()
        self.player_name = ""
        self.final_score = 0.0

        self.session = None             # type: Optional[SimulationSession]
        self.driver = None              # type: Optional[TickDriver]
        self.running = True
        pygame.key.start_text_input()

    def _start_game(self):
        """Build a fresh session and begin ticking it."""
        if self.driver is not None:
            self.driver.stop()
        self.session = SimulationSession(self.config, on_game_over=self._handle_game_over)
        self.driver = TickDriver(self.session)
        self.game_screen = Screen.PLAYING
        logger.info("Starting game for %r", self.player_name)

    def _handle_game_over(self, score: float):
        self.final_score = score
        self.game_screen = Screen.GAMEOVER

    def handle_input(self):
        """Process pending pygame events for the current screen."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.TEXTINPUT and self.game_screen == Screen.NAME_ENTRY:
                self.name_entry.insert(event.text)
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.running = False

                # Name entry input
                elif self.game_screen == Screen.NAME_ENTRY:
                    if event.key == pygame.K_BACKSPACE:
                        self.name_entry.backspace()
                    elif event.key == pygame.K_RETURN:
                        name = self.name_entry.submit()
                        if name:
                            self.player_name = name
                            pygame.key.stop_text_input()
                            self._start_game()

                # Steering
                elif self.game_screen == Screen.PLAYING:
                    direction = direction_for_key(event.key)
                    if direction is not None:
                        self.session.queue_direction(direction)

                # Game over input
                elif self.game_screen == Screen.GAMEOVER:
                    if event.key in (pygame.K_RETURN, pygame.K_SPACE):
                        self._start_game()

    def _to_pixels(self, point, centered: bool = False):
        cell = self.config.CELL_SIZE
        offset = cell / 2 if centered else 0
        return (point[0] * cell + offset, point[1] * cell + offset)

    def render(self):
        """Render the grid, territory, trail, agent and HUD."""
        state = self.session.state
        cell = self.config.CELL_SIZE
        width, height = self.screen.get_size()

        self.screen.fill(COLORS["background"])

        # Subtle grid
        for x in range(self.config.GRID_WIDTH + 1):
            pygame.draw.line(self.screen, COLORS["grid"], (x * cell, 0), (x * cell, height))
        for y in range(self.config.GRID_HEIGHT + 1):
            pygame.draw.line(self.screen, COLORS["grid"], (0, y * cell), (width, y * cell))

        # Territory (holes drawn back in background colour)
        for polygon in state.territory:
            for index, ring in enumerate(polygon):
                if len(ring) < 3:
                    continue
                color = COLORS["territory"] if index == 0 else COLORS["background"]
                pygame.draw.polygon(self.screen, color, [self._to_pixels(p) for p in ring])

        # Trail line plus a preview of the area it would enclose
        if state.trail:
            self.trail_surface.fill((0, 0, 0, 0))
            points = list(state.trail) + [state.position]
            if len(points) >= 3:
                pygame.draw.polygon(self.trail_surface, COLORS["trail"],
                                    [self._to_pixels(p) for p in points])
            pygame.draw.lines(self.trail_surface, COLORS["trail"], False,
                              [self._to_pixels(p, centered=True) for p in points],
                              max(1, int(cell * 0.8)))
            self.screen.blit(self.trail_surface, (0, 0))

        # Agent head
        head = self._to_pixels(state.position, centered=True)
        pygame.draw.circle(self.screen, COLORS["snake"], head, int(cell * 0.6))

        # Player name above the head
        label = self.small_font.render(self.player_name, True, COLORS["text"])
        self.screen.blit(label, label.get_rect(midbottom=(head[0], head[1] - cell)))

        # HUD
        hud_text = self.font.render(f"{state.score:.1f}%", True, COLORS["text"])
        self.screen.blit(hud_text, (20, 20))

        pygame.display.flip()

    def render_name_entry(self):
        """Render the title and name prompt."""
        self.screen.fill(COLORS["background"])
        center_x = self.screen.get_width() // 2
        center_y = self.screen.get_height() // 2

        title = self.title_font.render("PAPER", True, COLORS["text"])
        self.screen.blit(title, title.get_rect(center=(center_x, center_y - 160)))
        subtitle = self.menu_font.render("SNAKE", True, (255, 255, 255))
        self.screen.blit(subtitle, subtitle.get_rect(center=(center_x, center_y - 110)))

        prompt = self.font.render("ENTER YOUR NAME", True, COLORS["muted"])
        self.screen.blit(prompt, prompt.get_rect(center=(center_x, center_y - 40)))
        name = self.menu_font.render(self.name_entry.text or "_", True, COLORS["text"])
        self.screen.blit(name, name.get_rect(center=(center_x, center_y)))

        y_offset = center_y + 70
        instructions = [
            "Press ENTER to start",
            "Arrow keys to move",
            "Capture territory by closing your trail",
            "Don't hit the edges!",
        ]
        for line in instructions:
            text = self.font.render(line, True, COLORS["muted"])
            self.screen.blit(text, text.get_rect(center=(center_x, y_offset)))
            y_offset += 24

        pygame.display.flip()

    def render_game_over(self):
        """Render the game over screen."""
        self.screen.fill(COLORS["background"])
        center_x = self.screen.get_width() // 2
        center_y = self.screen.get_height() // 2

        title = self.title_font.render("GAME OVER", True, COLORS["danger"])
        self.screen.blit(title, title.get_rect(center=(center_x, center_y - 100)))

        label = self.font.render("TERRITORY CAPTURED", True, COLORS["muted"])
        self.screen.blit(label, label.get_rect(center=(center_x, center_y - 20)))
        score = self.title_font.render(f"{self.final_score:.1f}%", True, COLORS["text"])
        self.screen.blit(score, score.get_rect(center=(center_x, center_y + 30)))

        cont = self.menu_font.render("Press ENTER to Play Again", True, COLORS["muted"])
        self.screen.blit(cont, cont.get_rect(center=(center_x, center_y + 110)))

        pygame.display.flip()

    def run(self):
        """
        Main loop.

        Frames run at the configured FPS; the driver decides separately how
        many simulation ticks each frame owes.
        """
        while self.running:
            self.clock.tick(self.config.FPS)

            self.handle_input()

            if self.game_screen == Screen.NAME_ENTRY:
                self.render_name_entry()

            elif self.game_screen == Screen.PLAYING:
                self.driver.update()
                if self.game_screen == Screen.PLAYING:
                    self.render()

            elif self.game_screen == Screen.GAMEOVER:
                self.render_game_over()

        if self.driver is not None:
            self.driver.stop()
        pygame.quit()


# ============================================================================
# ENTRY POINT
# ============================================================================

def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    game = PaperSnakeGame()
    game.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
