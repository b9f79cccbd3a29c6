"""Synthetic frames and templates shared by the tests."""
from pathlib import Path

import cv2
import numpy as np
import pytest

from hudsig.roi import Roi

FONT = {
    0: ["01110", "10001", "10011", "10101", "11001", "10001", "01110"],
    1: ["00100", "01100", "00100", "00100", "00100", "00100", "01110"],
    2: ["01110", "10001", "00001", "00010", "00100", "01000", "11111"],
    3: ["11111", "00010", "00100", "00010", "00001", "10001", "01110"],
    4: ["00010", "00110", "01010", "10010", "11111", "00010", "00010"],
    5: ["11111", "10000", "11110", "00001", "00001", "10001", "01110"],
    6: ["00110", "01000", "10000", "11110", "10001", "10001", "01110"],
    7: ["11111", "00001", "00010", "00100", "01000", "01000", "01000"],
    8: ["01110", "10001", "10001", "01110", "10001", "10001", "01110"],
    9: ["01110", "10001", "10001", "01111", "00001", "00010", "01100"],
}

GLYPH_W, GLYPH_H = 10, 14
WHITE = (255, 255, 255)
GREEN = (60, 230, 60)  # BGR, luminance 160

FRAME_W, FRAME_H = 200, 60
STRIP = Roi(20, 10, 120, 30)
SEP_X, SEP_Y, SEP_W, SEP_H = 60, 7, 6, 16  # strip-local


def glyph(digit: int, scale: int = 2) -> np.ndarray:
    rows = [[255 if c == "1" else 0 for c in r] for r in FONT[digit]]
    g = np.array(rows, dtype=np.uint8)
    return np.kron(g, np.ones((scale, scale), dtype=np.uint8))


def separator_bitmap() -> np.ndarray:
    sep = np.zeros((SEP_H, SEP_W), dtype=np.uint8)
    for r in range(SEP_H):
        sep[r, SEP_W - 1 - (r * SEP_W) // SEP_H] = 255
    return sep


def paint(frame: np.ndarray, bitmap: np.ndarray, x: int, y: int, bgr) -> None:
    h, w = bitmap.shape
    region = frame[y:y + h, x:x + w]
    region[bitmap > 0] = bgr


def draw_supply(frame: np.ndarray, used: str, total: str, separator: bool = True,
                strip: Roi = STRIP, shift=(0, 0)) -> None:
    """Draw ``used/total`` where the reader expects it, glyphs moved by ``shift``."""
    step = GLYPH_W + 1
    if separator:
        paint(frame, separator_bitmap(), strip.x + SEP_X, strip.y + SEP_Y, WHITE)
        left, right, top = SEP_X, SEP_X + SEP_W, SEP_Y + (SEP_H - GLYPH_H) // 2
    else:
        left = right = int(strip.w * 0.6)
        top = (strip.h - GLYPH_H) // 2
    sx, sy = shift
    for k, ch in enumerate(reversed(used)):
        x = left - (k + 1) * step
        paint(frame, glyph(int(ch)), strip.x + x + sx, strip.y + top + sy, WHITE)
    for k, ch in enumerate(total):
        x = right + 1 + k * step
        paint(frame, glyph(int(ch)), strip.x + x + sx, strip.y + top + sy, GREEN)


def blank_frame(w: int = FRAME_W, h: int = FRAME_H) -> np.ndarray:
    return np.zeros((h, w, 3), dtype=np.uint8)


def write_digit_templates(directory: Path, with_separator: bool = True) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    for d in range(10):
        cv2.imwrite(str(directory / f"{d}.png"), glyph(d))
    if with_separator:
        cv2.imwrite(str(directory / "slash.png"), separator_bitmap())
    return directory


def icon(kind: str) -> np.ndarray:
    img = np.zeros((12, 12), dtype=np.uint8)
    if kind == "marine":
        img[:6, :] = 255
    elif kind == "scv":
        img[:, :6] = 255
    return img


@pytest.fixture
def digit_dir(tmp_path):
    return write_digit_templates(tmp_path / "templates" / "digits")


@pytest.fixture
def queue_dir(tmp_path):
    d = tmp_path / "templates" / "queue"
    d.mkdir(parents=True, exist_ok=True)
    for kind in ("marine", "scv"):
        cv2.imwrite(str(d / f"{kind}.png"), icon(kind))
    return d
