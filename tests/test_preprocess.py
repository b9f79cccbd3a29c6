import numpy as np
import pytest

from hudsig.config import SupplyConfig
from hudsig.preprocess import MaskRule, binarize, binarize_threshold, color_mask, count_on, green_mask, load_mask, white_mask
from hudsig.roi import Roi


def _px(b, g, r):
    return np.array([[[b, g, r]]], dtype=np.uint8)


def test_green_rule():
    assert green_mask(_px(50, 200, 50))[0, 0] == 255
    assert green_mask(_px(50, 110, 50))[0, 0] == 0      # too dark
    assert green_mask(_px(50, 200, 185))[0, 0] == 0     # not green enough over red


def test_white_rule():
    assert white_mask(_px(250, 250, 250))[0, 0] == 255
    assert white_mask(_px(100, 100, 100))[0, 0] == 0    # too dark
    assert white_mask(_px(255, 150, 255))[0, 0] == 0    # too saturated


def test_white_excludes_green():
    px = _px(150, 200, 150)  # passes both raw rules
    assert green_mask(px)[0, 0] == 255
    assert white_mask(px)[0, 0] == 0


def test_color_mask_accepts_names_and_enum():
    px = _px(50, 200, 50)
    assert color_mask(px, "green")[0, 0] == 255
    assert color_mask(px, MaskRule.WHITE)[0, 0] == 0
    with pytest.raises(ValueError):
        color_mask(px, "red")


def test_load_mask_crops_first():
    img = np.zeros((10, 10, 3), dtype=np.uint8)
    img[2:4, 2:4] = (255, 255, 255)
    mask = load_mask(img, Roi(2, 2, 4, 4), "white")
    assert mask.shape == (4, 4)
    assert count_on(mask) == 4
    assert set(np.unique(mask)) <= {0, 255}


@pytest.mark.parametrize("value,expected", [(50, 0), (79, 0), (80, 255), (120, 255), (180, 255), (200, 255)])
def test_binarize_uniform_crop(value, expected):
    gray = np.full((6, 5), value, dtype=np.uint8)
    out = binarize(gray)
    assert (out == expected).all()


def test_binarize_threshold_clamps():
    assert binarize_threshold(np.full((3, 3), 10, dtype=np.uint8)) == 80
    assert binarize_threshold(np.full((3, 3), 250, dtype=np.uint8)) == 180
    g = np.array([[0, 200], [0, 200]], dtype=np.uint8)
    # mean 100, std 100 -> 150
    assert binarize_threshold(g) == pytest.approx(150.0)
    assert binarize_threshold(g, SupplyConfig(bin_k=1.0)) == pytest.approx(180.0)


def test_binarize_separates_glyph_from_background():
    g = np.full((10, 10), 30, dtype=np.uint8)
    g[2:8, 4:6] = 160
    out = binarize(g)
    assert count_on(out) == 12
    assert (out[2:8, 4:6] == 255).all()
