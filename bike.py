#!/usr/bin/env python3
"""
Bike -- Ride your bike down the hill, a terminal arcade game using curses.
Steer the little '8' down the path and dodge the obstacles falling toward
you. Survive as long as you can; five hits and the ride is over.
Arrow keys or h/j/k/l to steer, Space to start, Q to quit.
"""

import curses
import logging
import random
import sys
import time

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

VERSION = "1.1"

NUM_ENEMIES = 400      # size of the enemy slot pool
MAX_HITS = 5           # game is over when MAX_HITS is reached
PATH_WIDTH = 30
PATH_LENGTH = 25
MIN_HEIGHT = PATH_LENGTH + 1
MIN_WIDTH = PATH_WIDTH + 2

BIKE_CHAR = "8"
PATH_CHAR = "|"
ENEMY_CHARS = "o#*"
SPAWN_ODDS = 103       # each free slot spawns with probability 1/SPAWN_ODDS

START_SPEED = 5        # enemies advance once every speed + 1 ticks
MIN_SPEED = 0
SPEED_RAMP_SECS = 10

FRAME_DELAY = 0.05

# Key bindings
LEFT_KEYS = (curses.KEY_LEFT, ord('j'), ord('h'))
RIGHT_KEYS = (curses.KEY_RIGHT, ord('k'), ord('l'))
QUIT_KEYS = (ord('q'), ord('Q'))
START_KEY = ord(' ')
NO_KEY = -1

# Game states
STATE_PLAYING = "playing"
STATE_GAME_OVER = "game_over"
STATE_QUIT = "quit"

# Color pair IDs
COLOR_DEFAULT = 0
COLOR_BIKE = 1
COLOR_ENEMY_1 = 2
COLOR_ENEMY_2 = 3
COLOR_ENEMY_3 = 4
COLOR_STATUS = 5
COLOR_PATH = 6

COLOR_PAIRS = [
    (COLOR_BIKE,    curses.COLOR_WHITE,   curses.COLOR_BLACK),
    (COLOR_ENEMY_1, curses.COLOR_YELLOW,  curses.COLOR_BLACK),
    (COLOR_ENEMY_2, curses.COLOR_RED,     curses.COLOR_BLACK),
    (COLOR_ENEMY_3, curses.COLOR_GREEN,   curses.COLOR_BLACK),
    (COLOR_STATUS,  curses.COLOR_WHITE,   curses.COLOR_BLUE),
    (COLOR_PATH,    curses.COLOR_MAGENTA, curses.COLOR_BLACK),
]

ENEMY_COLOR_MAP = {
    "o": COLOR_ENEMY_1,
    "#": COLOR_ENEMY_2,
    "*": COLOR_ENEMY_3,
}


# ---------------------------------------------------------------------------
# Terminal adapter
# ---------------------------------------------------------------------------

class CursesTerminal:
    """Thin wrapper over a curses window.

    The game only ever calls dimensions, clear, draw, read_key,
    wait_for_key and present, so anything offering those can stand in
    for the real screen.
    """

    def __init__(self, stdscr):
        self.stdscr = stdscr
        self.use_colors = self._init_colors()
        try:
            curses.curs_set(0)
        except curses.error:
            pass
        stdscr.keypad(True)
        stdscr.leaveok(True)
        stdscr.nodelay(True)

    @staticmethod
    def _init_colors():
        """Register color pairs; return False when the terminal has none."""
        if not curses.has_colors():
            return False
        try:
            curses.start_color()
            for pair_id, fg, bg in COLOR_PAIRS:
                curses.init_pair(pair_id, fg, bg)
        except curses.error:
            # Too few color pairs counts as no color support.
            return False
        return True

    def attr_for(self, color):
        if self.use_colors:
            return curses.color_pair(color)
        if color == COLOR_STATUS:
            return curses.A_STANDOUT
        return curses.A_NORMAL

    def dimensions(self):
        return self.stdscr.getmaxyx()

    def clear(self):
        self.stdscr.erase()

    def draw(self, y, x, text, color=COLOR_DEFAULT):
        """Write text at (y, x), silently ignoring out-of-bounds errors."""
        max_y, max_x = self.stdscr.getmaxyx()
        if not (0 <= y < max_y and 0 <= x < max_x):
            return
        # Truncate so long lines never wrap onto the next row
        text = text[:max_x - x]
        try:
            self.stdscr.addstr(y, x, text, self.attr_for(color))
        except curses.error:
            # Writing the bottom-right cell moves the cursor off-screen.
            pass

    def read_key(self):
        return self.stdscr.getch()

    def wait_for_key(self, keys):
        """Block until one of keys is pressed and return it."""
        self.stdscr.nodelay(False)
        try:
            key = self.stdscr.getch()
            while key not in keys:
                key = self.stdscr.getch()
        finally:
            self.stdscr.nodelay(True)
        return key

    def present(self):
        self.stdscr.refresh()


# ---------------------------------------------------------------------------
# Layout and state
# ---------------------------------------------------------------------------

def calculate_layout(max_y, max_x):
    """Calculate path edges and bike bounds for a max_y x max_x screen."""
    side_edge = (max_x - PATH_WIDTH) // 2
    return {
        "side_edge": side_edge,
        "top_edge": max_y - PATH_LENGTH,
        "left_bound": side_edge + 1,
        "right_bound": max_x - 1 - side_edge,
        "bike_y": max_y - 2,
        "max_y": max_y,
        "max_x": max_x,
    }


def create_enemy_slot():
    return {"used": False, "x": 0, "y": 0, "char": " ", "color": COLOR_DEFAULT}


def create_state(layout, now, use_colors=False):
    """Create a fresh game session."""
    return {
        "layout": layout,
        "x": layout["max_x"] // 2,
        "y": layout["bike_y"],
        "hits": 0,
        "steps": 0,
        "speed": START_SPEED,
        "enemies": [create_enemy_slot() for _ in range(NUM_ENEMIES)],
        "start_time": now,
        "first_hit_time": None,
        "end_time": None,
        "next_ramp": now + SPEED_RAMP_SECS,
        "done": False,
        "status": STATE_PLAYING,
        "use_colors": use_colors,
    }


# ---------------------------------------------------------------------------
# Enemy pool
# ---------------------------------------------------------------------------

def init_enemy(state, enemy, initial):
    """Occupy a free slot with a new enemy.

    Enemies placed during the initial fill are scattered over the upper
    half of the path; later ones enter at the top edge.
    """
    layout = state["layout"]
    enemy["used"] = True
    enemy["x"] = layout["left_bound"] + random.randrange(PATH_WIDTH - 1)
    if initial:
        enemy["y"] = layout["top_edge"] + random.randrange(PATH_LENGTH // 2)
    else:
        enemy["y"] = layout["top_edge"]
    enemy["char"] = random.choice(ENEMY_CHARS)
    enemy["color"] = ENEMY_COLOR_MAP[enemy["char"]]


def spawn_enemies(state, initial=False):
    """Roll each free slot for a new enemy. Returns the number placed.

    The initial fill scans the whole pool; during play at most one enemy
    is placed per tick.
    """
    placed = 0
    for enemy in state["enemies"]:
        if not enemy["used"] and random.randrange(SPAWN_ODDS) == 0:
            init_enemy(state, enemy, initial)
            placed += 1
            if not initial:
                break
    return placed


def advance_enemies(state):
    """Move every enemy down one row once every speed + 1 ticks."""
    if state["steps"] < state["speed"]:
        state["steps"] += 1
        return False
    state["steps"] = 0
    for enemy in state["enemies"]:
        if enemy["used"]:
            enemy["y"] += 1
    return True


def prune_enemies(state):
    """Free the slots of enemies that dropped below the screen."""
    bottom = state["layout"]["max_y"] - 1
    freed = 0
    for enemy in state["enemies"]:
        if enemy["used"] and enemy["y"] > bottom:
            enemy["used"] = False
            freed += 1
    return freed


def ramp_speed(state, now):
    """Shorten the advance interval every SPEED_RAMP_SECS seconds."""
    if now < state["next_ramp"]:
        return
    state["next_ramp"] += SPEED_RAMP_SECS
    if state["speed"] > MIN_SPEED:
        state["speed"] -= 1
        logger.debug("speed ramped to %d", state["speed"])


# ---------------------------------------------------------------------------
# Collision detection
# ---------------------------------------------------------------------------

def detect_collisions(state, now):
    """Count enemies sitting exactly on the bike. Returns hits this tick."""
    hits = 0
    for enemy in state["enemies"]:
        if enemy["used"] and enemy["x"] == state["x"] and enemy["y"] == state["y"]:
            enemy["used"] = False
            hits += 1
            state["hits"] += 1
            if state["first_hit_time"] is None:
                state["first_hit_time"] = now
            logger.info("hit %r at x=%d (total %d)",
                        enemy["char"], state["x"], state["hits"])
    return hits


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------

def handle_input(state, key):
    """Apply one key press to the session."""
    layout = state["layout"]
    if key in QUIT_KEYS:
        state["done"] = True
        state["status"] = STATE_QUIT
    elif key in LEFT_KEYS:
        if state["x"] > layout["left_bound"]:
            state["x"] -= 1
    elif key in RIGHT_KEYS:
        if state["x"] < layout["right_bound"]:
            state["x"] += 1


# ---------------------------------------------------------------------------
# Draw functions
# ---------------------------------------------------------------------------

def draw_path(term, state):
    layout = state["layout"]
    right = layout["max_x"] - layout["side_edge"]
    for line in range(layout["top_edge"], layout["max_y"] - 1):
        term.draw(line, layout["side_edge"], PATH_CHAR, COLOR_PATH)
        term.draw(line, right, PATH_CHAR, COLOR_PATH)


def draw_enemies(term, state):
    """Draw every live enemy, then free the ones that left the screen."""
    for enemy in state["enemies"]:
        if enemy["used"]:
            term.draw(enemy["y"], enemy["x"], enemy["char"], enemy["color"])
    prune_enemies(state)


def draw_bike(term, state):
    term.draw(state["y"], state["x"], BIKE_CHAR, COLOR_BIKE)


def draw_status_bar(term, state):
    """Draw the remaining lives down the left margin and the position line."""
    max_y = state["layout"]["max_y"]
    for i in range(MAX_HITS - state["hits"]):
        term.draw(max_y - 3 - i * 2, 3, BIKE_CHAR, COLOR_STATUS)
    term.draw(max_y - 1, 0, f"Pos: {state['x']:02d} - Hits: {state['hits']}",
              COLOR_STATUS)


def draw_title_screen(term):
    max_y, max_x = term.dimensions()
    lines = [
        f" << BIKE {VERSION} >>",
        "",
        "Objective: Ride your bike down the hill without",
        f"hitting more than {MAX_HITS} obstacles.",
        f"Your bike is the little '{BIKE_CHAR}' at the bottom of the screen.",
        "Use the left arrow key, or 'j', or 'h' to move left.",
        "Use the right arrow key, or 'k', or 'l' to move right.",
        "Hit the space bar to begin!",
        "Press 'q' to quit while in the game.",
    ]
    start_y = max_y // 2 - 5
    term.clear()
    for i, line in enumerate(lines):
        term.draw(start_y + i, max(0, max_x // 2 - len(line) // 2), line)
    term.present()


def draw_too_small(term, max_y, max_x):
    term.clear()
    term.draw(0, 0, "Terminal too small!", COLOR_STATUS)
    term.draw(1, 0, f"Need {MIN_HEIGHT}x{MIN_WIDTH}, got {max_y}x{max_x}")
    term.draw(2, 0, "Press 'q' to quit.")
    term.present()


# ---------------------------------------------------------------------------
# Game loop
# ---------------------------------------------------------------------------

def advance_game(term, state, now):
    """Run one frame: spawn, move, draw and collide."""
    term.clear()
    draw_path(term, state)
    spawn_enemies(state)
    advance_enemies(state)
    draw_enemies(term, state)
    draw_bike(term, state)
    detect_collisions(state, now)
    draw_status_bar(term, state)
    term.present()


def run_game(term, state, delay=FRAME_DELAY):
    """Tick until the bike is wrecked or the player quits."""
    while not state["done"]:
        frame_start = time.time()

        handle_input(state, term.read_key())
        if state["done"]:
            break

        advance_game(term, state, frame_start)
        ramp_speed(state, frame_start)

        if state["hits"] >= MAX_HITS:
            state["done"] = True
            state["status"] = STATE_GAME_OVER
            state["end_time"] = time.time()
            break

        # Frame rate limiter
        elapsed = time.time() - frame_start
        time.sleep(max(0, delay - elapsed))

    logger.info("session ended: %s after %d hits", state["status"], state["hits"])
    return state["status"]


def game_over_summary(state):
    """Return the two report lines printed after a lost game."""
    end = state["end_time"]
    lasted = int(end - state["start_time"])
    first_hit = state["first_hit_time"]
    if first_hit is None:
        first_hit = end
    flawless = int(first_hit - state["start_time"])
    return [
        f"GAME OVER -- You lasted {lasted} seconds.",
        f"You rode flawlessly for {flawless} seconds.",
    ]


def play(term, delay=FRAME_DELAY):
    """Title screen, then one session. Returns the final session state."""
    max_y, max_x = term.dimensions()
    layout = calculate_layout(max_y, max_x)
    use_colors = term.use_colors

    if max_y < MIN_HEIGHT or max_x < MIN_WIDTH:
        draw_too_small(term, max_y, max_x)
        term.wait_for_key(QUIT_KEYS)
        state = create_state(layout, time.time(), use_colors)
        state["done"] = True
        state["status"] = STATE_QUIT
        return state

    draw_title_screen(term)
    key = term.wait_for_key((START_KEY,) + QUIT_KEYS)
    state = create_state(layout, time.time(), use_colors)
    if key in QUIT_KEYS:
        state["done"] = True
        state["status"] = STATE_QUIT
        return state

    spawn_enemies(state, initial=True)
    advance_game(term, state, state["start_time"])
    run_game(term, state, delay)
    return state


def main(stdscr):
    """Main entry -- called by curses.wrapper()."""
    curses.nonl()
    return play(CursesTerminal(stdscr))


def run():
    state = curses.wrapper(main)
    if state["status"] == STATE_GAME_OVER:
        for line in game_over_summary(state):
            print(line)
    return 0


if __name__ == "__main__":
    sys.exit(run())
