"""Block graphics drawn with coloured text cells."""

from zeroshell.screen import COLS, ROWS


def draw_pixel(screen, x, y, color):
    """Paint a 2x1 cell pixel; return False if it lies off the canvas."""
    x, y, color = x & 0xFF, y & 0xFF, color & 0xFF
    if not (x < COLS // 2 and y < ROWS // 2):
        return False
    loc = 4 * x + 2 * COLS * y
    attr = (color << 4) & 0xFF
    screen.video[loc:loc + 4] = bytes((0, attr, 0, attr))
    return True


def straight_line(screen, x, y, orientation, length, color):
    """Draw right (0), left (1), up (2) or down (3) from a point."""
    step = {0: (1, 0), 1: (-1, 0), 2: (0, -1), 3: (0, 1)}.get(orientation)
    if step is None:
        return
    dx, dy = step
    for i in range(length & 0xFF):
        draw_pixel(screen, x + dx * i, y + dy * i, color)


def draw_line(screen, x_start, y_start, x_end, y_end, color):
    """Draw a stepped line between two points."""
    x_start, y_start = x_start & 0xFF, y_start & 0xFF
    x_end, y_end = x_end & 0xFF, y_end & 0xFF
    run, factor_x = abs(x_start - x_end), (x_end > x_start) - (x_end < x_start)
    rise, factor_y = abs(y_start - y_end), (y_end > y_start) - (y_end < y_start)

    if rise == 0:
        if factor_x:
            straight_line(screen, x_start, y_start, 0 if factor_x > 0 else 1, run, color)
        return
    if run == 0:
        straight_line(screen, x_start, y_start, 3 if factor_y > 0 else 2, rise, color)
        return

    if run > rise:
        step_run, step_rise = run // rise, 1
    elif rise > run:
        step_run, step_rise = 1, rise // run
    else:
        step_run = step_rise = 1

    posx, posy = x_start, y_start
    for _ in range(40):
        straight_line(screen, posx, posy, 3 if factor_y > 0 else 2, step_rise, color)
        posy = (posy + factor_y * step_rise) & 0xFFFFFFFF
        straight_line(screen, posx, posy, 0 if factor_x > 0 else 1, step_run, color)
        posx = (posx + factor_x * step_run) & 0xFFFFFFFF
        if posx == x_end or posy == y_end:
            break