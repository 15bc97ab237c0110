"""
UI Vision Module - reads the text readouts of the dungeon screen.

Handles:
- Floor and player coordinates ("D1 (12,7)") under the dungeon map
- The "dead" label on party member cards

Two coordinate readers exist. GlyphCoordinateReader matches the game's
pixel font directly and needs nothing but the frame. CoordinateReader runs
Tesseract over the readout region and is kept for screens where the glyph
tables do not line up.
"""

import re
import shutil
from typing import Optional, Sequence, Tuple

import cv2
import numpy as np
import pytesseract

from endorbot.models.state import Coords, DungeonInfo
from endorbot.vision import screen_points as sp

# Resolve tesseract executable if available in PATH.
TESSERACT_CMD = shutil.which("tesseract")
if TESSERACT_CMD:
    pytesseract.pytesseract.tesseract_cmd = TESSERACT_CMD

COORDINATES_PATTERN = re.compile(r"\(\s*(\d+)\s*[,.]\s*(\d+)\s*\)")

GLYPH_FLOOR = "D1"
GLYPH_TEXT = sp.TEXT
GLYPH_BACKGROUND = sp.TILE_UNEXPLORED
# Longest readout is "(xx,yy)"; stop scanning after this many glyphs.
MAX_GLYPHS = 12

COMMA = ","
END = None

# Glyph probe tables, relative to the glyph anchor. Each rule is a list of
# clauses; a clause holds if any of its (dx, dy, color, expected) checks
# holds, and a rule matches when every clause holds. Rules are tried in
# order and the first match wins.
_T, _B = GLYPH_TEXT, GLYPH_BACKGROUND
GLYPH_RULES: Sequence[Tuple[object, Sequence[Sequence[Tuple[int, int, tuple, bool]]]]] = (
    (END, (
        ((0, -2, _T, True),),
        ((0, 26, _T, True),),
    )),
    (COMMA, (
        ((0, 25, _T, True), (0, 26, _T, True)),
    )),
    (2, (
        ((0, 1, _T, True),),
        ((-5, 3, _T, True),),
        ((-2, 6, _B, True),),
        ((4, 6, _T, True),),
        ((3, 19, _T, True),),
        ((-6, 3, _T, True),),
        ((-6, 21, _T, True),),
    )),
    (1, (
        ((0, 1, _T, True),),
        ((-5, 3, _T, True),),
        ((-5, 10, _T, False),),
        ((-6, 21, _T, True),),
    )),
    (0, (
        ((0, 1, _T, True),),
        ((-1, 10, _T, True),),
        ((-6, 10, _T, True),),
        ((5, 5, _T, True),),
        ((-5, 4, _T, True),),
        ((-6, 0, _B, True),),
        ((-6, 14, _T, True),),
        ((-6, 9, _T, True),),
    )),
    (9, (
        ((0, 1, _T, True),),
        ((-7, 0, _B, True),),
        ((0, 14, _B, True),),
        ((-7, 14, _B, True),),
        ((-6, 9, _T, True),),
    )),
    (6, (
        ((0, 1, _T, True),),
        ((4, 6, _T, False),),
        ((-5, 14, _T, True), (-6, 14, _T, True)),
        ((-7, 0, _B, True),),
        ((0, 14, _B, True),),
        ((-6, 9, _T, True), (-4, 9, _T, True)),
    )),
    (8, (
        ((0, 1, _T, True),),
        ((-3, 5, _T, True), (-5, 5, _T, True)),
        ((6, 5, _T, True), (4, 5, _T, True)),
        ((7, 16, _T, True), (5, 16, _T, True)),
        ((-4, 19, _T, True),),
    )),
    (5, (
        ((0, 1, _T, True),),
        ((0, 5, _T, False),),
        ((-5, 6, _T, True), (-3, 6, _T, True)),
        ((1, 6, _B, True),),
        ((1, 14, _T, False),),
        ((-4, 2, _T, True),),
        ((4, 2, _T, True),),
    )),
    (4, (
        ((2, 1, _T, True),),
        ((-2, 2, _T, False), (-4, 2, _T, False)),
        ((-1, 11, _T, False),),
    )),
    (7, (
        ((0, 1, _T, True),),
        ((-2, 6, _T, False),),
        ((6, 16, _T, False),),
        ((-5, 2, _T, True),),
        ((5, 2, _T, True),),
    )),
    (3, (
        ((0, 1, _T, True),),
        ((-5, 2, _T, True),),
        ((-1, 10, _T, True),),
        ((-4, 18, _T, True),),
    )),
)


def parse_coordinates(text: str) -> DungeonInfo:
    """
    Parse an OCR'd readout such as ``"D3 (14,9)"``.

    Floor is the text before the first space. Coordinates are None when no
    ``(x,y)`` pair can be found.
    """
    text = " ".join(text.split())
    if not text:
        return DungeonInfo()

    floor = text.split(" ", 1)[0]
    if floor.startswith("("):
        floor = ""

    match = COORDINATES_PATTERN.search(text)
    coordinates = None
    if match:
        coordinates = Coords(int(match.group(1)), int(match.group(2)))
    return DungeonInfo(floor=floor, coordinates=coordinates)


def _pixel(frame: np.ndarray, x: int, y: int) -> Optional[tuple]:
    h, w = frame.shape[:2]
    if x < 0 or y < 0 or x >= w or y >= h:
        return None
    return tuple(int(v) for v in frame[y, x, :3])


class GlyphCoordinateReader:
    """Reads the coordinate readout by matching the game's pixel font."""

    def __init__(self, debug: bool = False):
        self.debug = debug

    def classify_glyph(self, frame: np.ndarray, x: int, y: int):
        """Return a digit, COMMA, or END for the glyph anchored at (x, y)."""
        for glyph, clauses in GLYPH_RULES:
            if all(self._clause_holds(frame, x, y, clause) for clause in clauses):
                return glyph
        return END

    @staticmethod
    def _clause_holds(frame, x, y, clause) -> bool:
        for dx, dy, color, expected in clause:
            if (_pixel(frame, x + dx, y + dy) == color) == expected:
                return True
        return False

    def find_start(self, frame: np.ndarray) -> Optional[int]:
        start, end = sp.GLYPH_SCAN_X
        for x in range(start, end):
            if _pixel(frame, x, sp.GLYPH_ROW) == GLYPH_TEXT:
                return x
        return None

    def read(self, frame: np.ndarray) -> DungeonInfo:
        start = self.find_start(frame)
        if start is None:
            return DungeonInfo()

        x = start + sp.GLYPH_FIRST_OFFSET
        y = sp.GLYPH_ROW + 1
        numbers = []
        current = None
        for _ in range(MAX_GLYPHS):
            glyph = self.classify_glyph(frame, x, y)
            if glyph is END:
                break
            if glyph == COMMA:
                # Commas are one pixel wider than digits.
                x += 1
                if current is not None:
                    numbers.append(current)
                    current = None
            else:
                current = glyph if current is None else current * 10 + glyph
            x += sp.GLYPH_PITCH
        if current is not None:
            numbers.append(current)

        if self.debug:
            print(f"[SCREEN] Readout at x={start}: numbers={numbers}")

        coordinates = Coords(numbers[0], numbers[1]) if len(numbers) >= 2 else None
        return DungeonInfo(floor=GLYPH_FLOOR, coordinates=coordinates)


class TextRegionReader:
    """Tesseract OCR over one light-on-dark text region."""

    PSM_CONFIGS = (
        ('--psm 7 --oem 1', 'PSM7+OEM1'),
        ('--psm 7 --oem 1 -c tessedit_char_whitelist="D0123456789(), "', 'PSM7+whitelist'),
        ('--psm 6 --oem 1', 'PSM6+OEM1'),
        ('--psm 13 --oem 1', 'PSM13+OEM1'),  # Raw line
    )

    def __init__(self, debug: bool = False, scale_factor: int = 3):
        self.debug = debug
        self.scale_factor = scale_factor

    def preprocess(self, region: np.ndarray) -> np.ndarray:
        """Grayscale, upscale and binarise a readout crop (light text on dark)."""
        gray = cv2.cvtColor(region, cv2.COLOR_RGB2GRAY)
        h, w = gray.shape[:2]
        resized = cv2.resize(
            gray, (w * self.scale_factor, h * self.scale_factor),
            interpolation=cv2.INTER_CUBIC,
        )
        _, binary = cv2.threshold(resized, 0, 255, cv2.THRESH_BINARY_INV + cv2.THRESH_OTSU)
        return binary

    def read_text(self, region: np.ndarray) -> str:
        if region.size == 0:
            return ""
        binary = self.preprocess(region)
        for config, name in self.PSM_CONFIGS:
            try:
                result = pytesseract.image_to_string(binary, config=config).strip()
            except pytesseract.TesseractError as e:
                if self.debug:
                    print(f"  [{name}] → ERROR: {e}")
                continue
            if self.debug:
                print(f"  [{name}] → '{result}'")
            if result:
                return result
        return ""


class CoordinateReader(TextRegionReader):
    """Reads the coordinate readout with Tesseract OCR."""

    def read(self, frame: np.ndarray) -> DungeonInfo:
        region = sp.OCR_REGIONS['coordinates'].extract_from_frame(frame)
        info = parse_coordinates(self.read_text(region))
        if self.debug:
            print(f"[SCREEN] OCR readout: floor={info.floor!r} coords={info.coordinates}")
        return info


class PartyTextReader(TextRegionReader):
    """Looks for the "dead" label on the party cards."""

    PSM_CONFIGS = (
        ('--psm 6 --oem 1', 'PSM6+OEM1'),
        ('--psm 11 --oem 1', 'PSM11+OEM1'),  # Sparse text
    )

    def __init__(self, debug: bool = False):
        super().__init__(debug=debug, scale_factor=2)

    def has_dead(self, frame: np.ndarray) -> bool:
        region = sp.OCR_REGIONS['party'].extract_from_frame(frame)
        text = self.read_text(region)
        return "dead" in text.lower()
