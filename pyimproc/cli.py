from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from pyimproc.config.io import load_config
from pyimproc.histogram import create_histogram, create_rgb_histograms
from pyimproc.image import RgbImage
from pyimproc.io.image import load_image, save_image
from pyimproc.pipelines import operations
from pyimproc.pipelines.registry import OPERATION_REGISTRY
from pyimproc.pipelines.runner import PipelineConfig, run_pipeline
from pyimproc.reporting.report import histogram_report, save_run_report, stamp_report_payload
from pyimproc.utils.jsonable import to_jsonable
from pyimproc.visualization.viewer import MatplotlibViewer, SnapshotViewer, Viewer, display_image

logger = logging.getLogger(__name__)

THRESHOLD_LEVELS = (64, 128, 192)


def _add_viewer_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--show", action="store_true", help="Display images in a matplotlib window")
    parser.add_argument(
        "--snapshot-dir",
        default=None,
        help="Write every displayed image as PNG into this directory instead of opening a window",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pyimproc", description="Classic image processing on netpbm images")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level. Default: WARNING",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("threshold", help="Threshold at 64, 128 and 192 and save threshold<N>.pbm")
    p.add_argument("image", help="Input .pgm/.pbm (or any OpenCV-readable) image")
    p.add_argument("--out-dir", default=".", help="Directory for the threshold<N>.pbm files. Default: .")
    _add_viewer_args(p)

    p = sub.add_parser("dt", help="Distance transform")
    p.add_argument("image")
    p.add_argument("--metric", default="euclid", choices=["manhattan", "chessboard", "euclid", "sqeuclid"])
    p.add_argument("--foreground", type=int, default=1, help="Foreground pixel value. Default: 1")
    p.add_argument("--output", required=True, help="Output image path")
    _add_viewer_args(p)

    p = sub.add_parser("morph", help="Grey-value dilation/erosion with a rectangle")
    p.add_argument("image")
    p.add_argument("--op", default="dilate", choices=["dilate", "erode"])
    p.add_argument("--width", type=int, default=3, help="Kernel width. Default: 3")
    p.add_argument("--height", type=int, default=3, help="Kernel height. Default: 3")
    p.add_argument("--output", required=True, help="Output image path")
    _add_viewer_args(p)

    p = sub.add_parser("fft", help="Save the centred magnitude spectrum as an image")
    p.add_argument("image")
    p.add_argument("--output", required=True, help="Output image path (e.g. spectrum.pgm)")
    p.add_argument("--linear", action="store_true", help="Scale magnitudes linearly instead of log1p")
    _add_viewer_args(p)

    p = sub.add_parser("histogram", help="Histogram(s) over the image's dynamic range as JSON")
    p.add_argument("image")
    p.add_argument("--kind", default="int", choices=["int", "rgb"])
    p.add_argument("--output", default=None, help="Optional JSON output path (default: stdout)")

    p = sub.add_parser("run", help="Run a JSON/YAML pipeline config")
    p.add_argument("--config", required=True, help="Pipeline config (.json/.yml/.yaml)")
    _add_viewer_args(p)

    p = sub.add_parser("ops", help="List registered pipeline operations")
    p.add_argument("--json", action="store_true", help="Output JSON instead of text")
    return parser


def _viewer_from_args(args: argparse.Namespace) -> Optional[Viewer]:
    if getattr(args, "snapshot_dir", None):
        return SnapshotViewer(args.snapshot_dir)
    if getattr(args, "show", False):
        return MatplotlibViewer()
    return None


def _finish(image, output: str, viewer: Optional[Viewer], title: str) -> None:
    with image:
        save_image(image, output)
        if viewer is not None:
            display_image(image, title, viewer=viewer)


def _cmd_threshold(args: argparse.Namespace) -> int:
    viewer = _viewer_from_args(args)
    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    with load_image(args.image, "int") as image:
        if viewer is not None:
            display_image(image, "Source Image", viewer=viewer)
        for level in THRESHOLD_LEVELS:
            filename = f"threshold{level}.pbm"
            _finish(operations.threshold(image, level), str(out_dir / filename), viewer, filename)
            print(out_dir / filename)
    return 0


def _cmd_dt(args: argparse.Namespace) -> int:
    with load_image(args.image, "int") as image:
        result = operations.distance(image, args.metric, args.foreground)
    _finish(result, args.output, _viewer_from_args(args), f"{args.metric} distance")
    return 0


def _cmd_morph(args: argparse.Namespace) -> int:
    func = operations.dilate if args.op == "dilate" else operations.erode
    with load_image(args.image, "int") as image:
        result = func(image, args.width, args.height)
    _finish(result, args.output, _viewer_from_args(args), f"{args.op} {args.width}x{args.height}")
    return 0


def _cmd_fft(args: argparse.Namespace) -> int:
    with load_image(args.image, "int") as image:
        result = operations.spectrum(image, log_scale=not args.linear)
    _finish(result, args.output, _viewer_from_args(args), "spectrum")
    return 0


def _cmd_histogram(args: argparse.Namespace) -> int:
    with load_image(args.image, args.kind) as image:
        if isinstance(image, RgbImage):
            histograms = list(create_rgb_histograms(image))
        else:
            histograms = [create_histogram(image)]
        payload = stamp_report_payload(histogram_report(image, histograms))
    payload["input"] = args.image

    if args.output:
        save_run_report(args.output, payload)
    else:
        print(json.dumps(to_jsonable(payload), indent=2, sort_keys=True))
    return 0


def _cmd_run(args: argparse.Namespace) -> int:
    config = PipelineConfig.from_dict(load_config(args.config, relative_to_file=True))
    summary = run_pipeline(config, viewer=_viewer_from_args(args))
    if config.report is None:
        print(json.dumps(to_jsonable(summary), indent=2, sort_keys=True))
    return 0


def _cmd_ops(args: argparse.Namespace) -> int:
    names = OPERATION_REGISTRY.available()
    if args.json:
        payload = {
            name: {
                "kinds": list(OPERATION_REGISTRY.info(name).kinds),
                **OPERATION_REGISTRY.info(name).metadata,
            }
            for name in names
        }
        print(json.dumps(payload, indent=2, sort_keys=True))
    else:
        for name in names:
            print(name)
    return 0


_COMMANDS = {
    "threshold": _cmd_threshold,
    "dt": _cmd_dt,
    "morph": _cmd_morph,
    "fft": _cmd_fft,
    "histogram": _cmd_histogram,
    "run": _cmd_run,
    "ops": _cmd_ops,
}


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    try:
        return _COMMANDS[args.command](args)
    except Exception as exc:  # noqa: BLE001 - CLI surface error
        logger.debug("%s failed", args.command, exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
