from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import numpy as np
from loguru import logger

from .config import SupplyConfig
from .preprocess import binarize
from .roi import load_gray, resize_gray

IMAGE_EXTS = (".png", ".jpg", ".jpeg")

@dataclass(frozen=True)
class DigitTemplates:
    """Binarized glyph bitmaps, all normalized to ``size`` = (w, h)."""
    size: Tuple[int, int]
    items: Tuple[Tuple[int, np.ndarray], ...]

    def __len__(self) -> int:
        return len(self.items)

    @classmethod
    def empty(cls) -> "DigitTemplates":
        return cls(size=(0, 0), items=())

    @classmethod
    def from_images(cls, images: Dict[int, np.ndarray],
                    cfg: Optional[SupplyConfig] = None) -> "DigitTemplates":
        if not images:
            return cls.empty()
        w = max(img.shape[1] for img in images.values())
        h = max(img.shape[0] for img in images.values())
        items = []
        for digit in sorted(images):
            glyph = binarize(resize_gray(images[digit], (w, h)), cfg)
            glyph.setflags(write=False)
            items.append((digit, glyph))
        return cls(size=(w, h), items=tuple(items))

@dataclass(frozen=True)
class QueueTemplates:
    items: Tuple[Tuple[str, np.ndarray], ...]

    def __len__(self) -> int:
        return len(self.items)

    @classmethod
    def from_images(cls, images: Dict[str, np.ndarray]) -> "QueueTemplates":
        items = []
        for icon_id in sorted(images):
            img = np.array(images[icon_id], dtype=np.uint8, copy=True)
            img.setflags(write=False)
            items.append((icon_id, img))
        return cls(items=tuple(items))

def _image_files(directory: Union[str, Path]) -> List[Path]:
    d = Path(directory)
    if not d.is_dir():
        return []
    return sorted(p for p in d.iterdir() if p.is_file() and p.suffix.lower() in IMAGE_EXTS)

def load_digit_templates(directory: Union[str, Path],
                         cfg: Optional[SupplyConfig] = None) -> DigitTemplates:
    images: Dict[int, np.ndarray] = {}
    for p in _image_files(directory):
        if not p.stem.isdigit() or len(p.stem) != 1:
            continue
        digit = int(p.stem)
        if digit in images:
            logger.debug(f"duplicate digit template ignored: {p.name}")
            continue
        images[digit] = load_gray(p)
    templates = DigitTemplates.from_images(images, cfg)
    logger.info(f"loaded {len(templates)} digit templates from {directory} size={templates.size}")
    return templates

def load_queue_templates(directory: Union[str, Path]) -> QueueTemplates:
    images: Dict[str, np.ndarray] = {}
    for p in _image_files(directory):
        if p.stem in images:
            continue
        images[p.stem] = load_gray(p)
    templates = QueueTemplates.from_images(images)
    logger.info(f"loaded {len(templates)} queue templates from {directory}")
    return templates

def load_separator(path: Union[str, Path, None]) -> Optional[np.ndarray]:
    if path is None:
        return None
    p = Path(path)
    if not p.is_file():
        return None
    return load_gray(p)

def find_separator(digits_dir: Union[str, Path]) -> Optional[Path]:
    for ext in IMAGE_EXTS:
        p = Path(digits_dir) / f"slash{ext}"
        if p.is_file():
            return p
    return None
