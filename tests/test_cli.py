"""
Tests for the command line interface.
"""

import numpy as np
import pytest

from stickerstag.cli import build_parser, main
from stickerstag.io import load_image, save_image
from stickerstag.pixel_buffer import PixelBuffer


@pytest.fixture
def art(tmp_path):
    pixels = np.full((40, 40, 3), 255, dtype=np.uint8)
    pixels[12:28, 12:28] = (30, 60, 90)
    return save_image(PixelBuffer(pixels), tmp_path / "fox.png")


class TestSingleFile:
    """One image per call."""

    def test_cutout(self, art, tmp_path):
        output = tmp_path / "fox.cutout.webp"
        assert main(["cutout", str(art), str(output), "--tolerance", "230"]) == 0
        image = load_image(output)
        assert image.alpha[0, 0] == 0
        assert tuple(image.pixels[20, 20]) == (30, 60, 90, 255)

    def test_sticker_chain(self, art, tmp_path):
        cutout = tmp_path / "fox.cutout.webp"
        sticker = tmp_path / "fox.sticker.png"
        assert main(["cutout", str(art), str(cutout)]) == 0
        assert main(["sticker", str(cutout), str(sticker), "--stroke-px", "5", "--strategy", "falloff"]) == 0
        assert load_image(sticker).size == (50, 50)

    def test_bevel_debug_maps(self, art, tmp_path):
        output = tmp_path / "fox.bevel.webp"
        assert main(["-q", "bevel", str(art), str(output), "--debug"]) == 0
        rim = load_image(tmp_path / "fox.bevel.rim.png")
        height = load_image(tmp_path / "fox.bevel.height.png")
        assert rim.size == (40, 40)
        assert height.size == (40, 40)

    def test_missing_input(self, tmp_path):
        assert main(["cutout", str(tmp_path / "nope.png"), str(tmp_path / "out.webp")]) == 1

    def test_lossy_output_rejected(self, art, tmp_path):
        assert main(["outline", str(art), str(tmp_path / "fox.jpg")]) == 1

    def test_out_of_range_is_clamped(self, art, tmp_path):
        output = tmp_path / "fox.edge.webp"
        with pytest.warns(Warning):
            code = main(["edge", str(art), str(output), "--edge-px", "-4"])
        assert code == 0
        assert output.exists()


class TestBatch:
    """Folder processing."""

    def test_stages(self, art, tmp_path, capsys):
        assert main(["batch", str(tmp_path), "cutout", "--workers", "1"]) == 0
        assert (tmp_path / "fox.cutout.webp").exists()
        assert main(["batch", str(tmp_path), "sticker", "--workers", "1"]) == 0
        assert (tmp_path / "fox.sticker.webp").exists()
        out = capsys.readouterr().out
        assert "cutout: 1 generated, 0 skipped, 0 errors" in out

    def test_rerun_skips(self, art, tmp_path, capsys):
        main(["batch", str(tmp_path), "cutout", "--workers", "1"])
        assert main(["batch", str(tmp_path), "cutout", "--workers", "1"]) == 0
        assert "0 generated, 1 skipped" in capsys.readouterr().out

    def test_debug_maps_are_not_inputs(self, art, tmp_path, capsys):
        assert main(["-q", "bevel", str(art), str(tmp_path / "fox.bevel.png"), "--debug"]) == 0
        assert (tmp_path / "fox.bevel.rim.png").exists()
        assert main(["batch", str(tmp_path), "cutout", "--workers", "1"]) == 0
        assert "cutout: 1 generated, 0 skipped, 0 errors" in capsys.readouterr().out
        assert not (tmp_path / "fox.bevel.rim.cutout.webp").exists()

    def test_failures_set_exit_code(self, art, tmp_path):
        (tmp_path / "broken.png").write_bytes(b"nope")
        assert main(["batch", str(tmp_path), "cutout", "--workers", "1"]) == 1
        assert (tmp_path / "fox.cutout.webp").exists()

    def test_custom_pipeline(self, art, tmp_path):
        code = main([
            "batch", str(tmp_path), "cutout", "--workers", "1",
            "--pipeline", "cutout(tolerance=230)|bevel(bevelPx=2)",
        ])
        assert code == 0
        assert (tmp_path / "fox.cutout.webp").exists()

    def test_invalid_pipeline(self, art, tmp_path):
        assert main(["batch", str(tmp_path), "cutout", "--pipeline", "cutout("]) == 1

    def test_missing_folder(self, tmp_path):
        assert main(["batch", str(tmp_path / "missing"), "cutout"]) == 1


class TestParser:
    """Argument parsing."""

    def test_stage_choices(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["batch", ".", "shadow"])

    def test_verbosity_exclusive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["-v", "-q", "cutout", "a.png", "b.webp"])
