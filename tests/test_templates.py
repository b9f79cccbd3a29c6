import cv2
import numpy as np

from hudsig.templates import (DigitTemplates, find_separator, load_digit_templates,
                              load_queue_templates, load_separator)

from conftest import glyph, write_digit_templates


def test_load_digit_templates_sorted_and_binarized(tmp_path):
    d = write_digit_templates(tmp_path / "digits")
    cv2.imwrite(str(d / "notes.png"), np.zeros((3, 3), np.uint8))
    t = load_digit_templates(d)
    assert [digit for digit, _ in t.items] == list(range(10))
    assert t.size == (10, 14)
    assert np.array_equal(t.items[4][1], glyph(4))


def test_digit_templates_normalized_to_largest(tmp_path):
    small = np.zeros((10, 6), dtype=np.uint8)
    small[2:8, 2:4] = 255
    big = np.zeros((14, 10), dtype=np.uint8)
    big[2:12, 3:7] = 255
    t = DigitTemplates.from_images({1: small, 7: big})
    assert t.size == (10, 14)
    assert all(img.shape == (14, 10) for _, img in t.items)
    assert set(np.unique(t.items[0][1])) <= {0, 255}


def test_missing_directories_give_empty_sets(tmp_path):
    assert len(load_digit_templates(tmp_path / "nope")) == 0
    assert len(load_queue_templates(tmp_path / "nope")) == 0
    assert load_separator(tmp_path / "nope.png") is None
    assert load_separator(None) is None


def test_queue_templates_keyed_by_stem(queue_dir):
    t = load_queue_templates(queue_dir)
    assert [k for k, _ in t.items] == ["marine", "scv"]
    assert not t.items[0][1].flags.writeable


def test_find_separator(digit_dir):
    assert find_separator(digit_dir).name == "slash.png"
    assert load_separator(find_separator(digit_dir)).shape == (16, 6)
