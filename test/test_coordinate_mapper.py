import sys
from pathlib import Path

# Add the project root (one level up from 'test') to sys.path
project_root = Path(__file__).resolve().parents[1]
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import pytest
from PIL import Image

from SnapDict.core.models import BBox
from SnapDict.services.capture.geometry import (
    IDENTITY_FIT, Rect, compute_cover_fit, compute_render_scale, crop_box, roi_rect,
)
from SnapDict.services.ocr.region_ocr_pipeline import capture_still


def _close(a: Rect, b: Rect, tol: float = 1e-6) -> bool:
    return all(abs(x - y) < tol for x, y in zip((a.x, a.y, a.width, a.height), (b.x, b.y, b.width, b.height)))


def test_cover_fit_crops_wider_frame_horizontally():
    # 1920x1080 frame in a 400x800 portrait viewport: height drives the scale
    fit = compute_cover_fit(1920, 1080, 400, 800)
    assert fit.scale == pytest.approx(800 / 1080)
    assert fit.offset_y == pytest.approx(0.0)
    assert fit.offset_x == pytest.approx((400 - 1920 * 800 / 1080) / 2)
    assert fit.offset_x < 0


def test_cover_fit_crops_taller_frame_vertically():
    fit = compute_cover_fit(480, 640, 1280, 720)
    assert fit.scale == pytest.approx(1280 / 480)
    assert fit.offset_x == pytest.approx(0.0)
    assert fit.offset_y < 0


def test_unloaded_frame_gives_identity_mapping():
    assert compute_cover_fit(0, 0, 400, 800) == IDENTITY_FIT
    r = Rect(10, 20, 30, 40)
    assert IDENTITY_FIT.display_to_native(r) == r


@pytest.mark.parametrize("native,client", [
    ((1920, 1080), (400, 800)),
    ((1280, 720), (1280, 720)),
    ((640, 480), (1024, 300)),
    ((3024, 4032), (390, 844)),
])
def test_native_display_round_trip(native, client):
    fit = compute_cover_fit(*native, *client)
    original = Rect(123.25, 77.5, 301.0, 58.75)
    back = fit.display_to_native(fit.native_to_display(original))
    assert _close(original, back)


def test_roi_is_centered_horizontally_at_one_third_height():
    roi = roi_rect(400, 900)
    assert roi.width == pytest.approx(340)
    assert roi.height == pytest.approx(160)
    assert roi.x == pytest.approx(30)
    assert roi.y + roi.height / 2 == pytest.approx(300)


def test_roi_maps_into_frame_pixels():
    fit = compute_cover_fit(1920, 1080, 400, 800)
    native = fit.display_to_native(roi_rect(400, 800))
    assert native.width == pytest.approx(340 / fit.scale)
    assert native.height == pytest.approx(160 / fit.scale)
    # ROI sits in the middle of the frame horizontally
    assert native.x + native.width / 2 == pytest.approx(960)


def test_crop_box_truncates_to_whole_pixels():
    assert crop_box(Rect(10.7, 5.2, 100.9, 20.99)) == (10, 5, 110, 25)


def test_render_scale_uses_independent_axes():
    scale = compute_render_scale(400, 100, 200, 100)
    r = scale.bbox_to_overlay(BBox(40, 10, 140, 60))
    assert (r.x, r.y, r.width, r.height) == (20, 10, 50, 50)


def test_render_scale_for_unloaded_still_is_zero_sized():
    scale = compute_render_scale(0, 0, 200, 100)
    r = scale.bbox_to_overlay(BBox(40, 10, 140, 60))
    assert r.width == 0 and r.height == 0
    assert scale.overlay_point_to_still(5, 5) is None


def test_cover_fit_for_unsized_client_is_identity():
    assert compute_cover_fit(1920, 1080, 0, 0) == IDENTITY_FIT


def test_capture_in_unsized_client_is_rejected():
    with pytest.raises(ValueError):
        capture_still(Image.new("RGB", (640, 480)), (0.0, 0.0))


def test_overlay_point_hits_box_in_still_space():
    scale = compute_render_scale(400, 100, 200, 100)
    point = scale.overlay_point_to_still(30, 20)
    assert point == (60, 20)
    assert BBox(40, 10, 140, 60).contains(*point)
    assert not BBox(0, 0, 50, 10).contains(*point)
