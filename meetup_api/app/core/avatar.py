"""
Deterministic profile pictures.

``generate_avatar`` turns a seed (the username) into a symmetric 5x5
identicon rendered as SVG and returns it as a ``data:`` URI, so it can
be stored in the ``profile_picture`` column and used directly as an
image source.  The same seed always produces the same picture.
"""

import base64
import hashlib

GRID = 5
CELL = 8


def generate_avatar(seed: str) -> str:
    digest = hashlib.sha256(seed.encode("utf-8")).digest()
    # First three bytes pick the colour, the rest switch cells on and off.
    colour = "#{:02x}{:02x}{:02x}".format(digest[0], digest[1], digest[2])
    size = GRID * CELL
    rects = []
    half = (GRID + 1) // 2
    for row in range(GRID):
        for col in range(half):
            if digest[3 + row * half + col] % 2:
                continue
            for x in sorted({col, GRID - 1 - col}):
                rects.append(
                    f'<rect x="{x * CELL}" y="{row * CELL}" width="{CELL}" height="{CELL}"/>'
                )
    svg = (
        f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 {size} {size}" '
        f'width="{size}" height="{size}">'
        f'<rect width="{size}" height="{size}" fill="#f0f0f0"/>'
        f'<g fill="{colour}">{"".join(rects)}</g></svg>'
    )
    encoded = base64.b64encode(svg.encode("utf-8")).decode("ascii")
    return f"data:image/svg+xml;base64,{encoded}"
